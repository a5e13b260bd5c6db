"""🔐 Credential policy data model.

Immutable value types shared by the advisor, the rotation tracker and the
workspace layer. Credential material is never held here, only opaque
references to it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Union

from .errors import InvalidInputError, PolicyConflictError
from .providers import normalize_host, parse_host_from_url

# Prefixes of raw tokens issued by common Git hosts.
RAW_TOKEN_PREFIXES = ("ghp_", "gho_", "ghu_", "ghs_", "github_pat_", "glpat-")


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthMethodKind(str, Enum):
    """Authentication method kinds."""

    OAUTH = "oauth"
    TOKEN_SECRET = "token_secret"


class RotationStatus(str, Enum):
    """Rotation status of a stored credential, ordered PENDING < DUE < OVERDUE."""

    PENDING = "pending"
    DUE = "due"
    OVERDUE = "overdue"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RotationStatus):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, RotationStatus):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, RotationStatus):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, RotationStatus):
            return NotImplemented
        return self.rank >= other.rank


_STATUS_RANK = {
    RotationStatus.PENDING: 0,
    RotationStatus.DUE: 1,
    RotationStatus.OVERDUE: 2,
}


class TokenLifecycleState(str, Enum):
    """States of the cyclic token-secret lifecycle."""

    ACTIVE = "active"
    DUE_FOR_ROTATION = "due_for_rotation"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class RepositoryTarget:
    """One Git repository to be connected to a workspace.

    Example:
        target = RepositoryTarget(host="github.com", is_private=True)
        target = RepositoryTarget.from_url("git@gitlab.example.com:team/repo.git")
    """

    host: str
    is_private: bool = True
    requires_sso: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "host", normalize_host(self.host))

    @classmethod
    def from_url(
        cls,
        url: str,
        is_private: bool = True,
        requires_sso: bool = False,
    ) -> RepositoryTarget:
        """Build a target from a Git remote URL."""
        return cls(
            host=parse_host_from_url(url),
            is_private=is_private,
            requires_sso=requires_sso,
        )


@dataclass(frozen=True)
class PolicyFlags:
    """Organizational constraints that steer the recommendation."""

    secrets_forbidden: bool = False
    is_automated_process: bool = False


@dataclass(frozen=True)
class OAuthMethod:
    """Delegated, auto-refreshed credential managed by the platform."""

    kind: AuthMethodKind = field(default=AuthMethodKind.OAUTH, init=False)

    def to_dict(self) -> dict:
        return {"kind": self.kind.value}


@dataclass(frozen=True)
class TokenSecretMethod:
    """Long-lived token stored in an external secret store.

    Only ``secret_identifier`` (a reference such as ``vault://git/analytics``)
    is held, never the token itself.
    """

    secret_identifier: str
    expires_at: datetime
    created_at: datetime = field(default_factory=utcnow)
    scopes: frozenset[str] = field(default_factory=frozenset)
    kind: AuthMethodKind = field(default=AuthMethodKind.TOKEN_SECRET, init=False)

    def __post_init__(self) -> None:
        identifier = (self.secret_identifier or "").strip()
        if not identifier:
            raise InvalidInputError(
                "secret_identifier", "secret identifier must not be empty"
            )
        if identifier.startswith(RAW_TOKEN_PREFIXES):
            raise InvalidInputError(
                "secret_identifier",
                "looks like a raw token; store it externally and pass its reference",
            )
        created_at = as_utc(self.created_at)
        expires_at = as_utc(self.expires_at)
        if expires_at <= created_at:
            raise InvalidInputError("expires_at", "must be later than created_at")

        object.__setattr__(self, "secret_identifier", identifier)
        object.__setattr__(self, "created_at", created_at)
        object.__setattr__(self, "expires_at", expires_at)
        object.__setattr__(self, "scopes", frozenset(self.scopes))

    @property
    def lifetime(self) -> timedelta:
        return self.expires_at - self.created_at

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "secret_identifier": self.secret_identifier,
            "scopes": sorted(self.scopes),
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }


AuthenticationMethod = Union[OAuthMethod, TokenSecretMethod]


@dataclass(frozen=True)
class RotationObligation:
    """Derived fact that a stored credential approaches or passed expiry."""

    secret_identifier: str
    expires_at: datetime
    due_at: datetime
    grace_period: timedelta
    status: RotationStatus

    @property
    def recommended_action(self) -> str:
        if self.status == RotationStatus.OVERDUE:
            return (
                f"Token {self.secret_identifier} expired at "
                f"{self.expires_at.isoformat()}; rotate it now."
            )
        if self.status == RotationStatus.DUE:
            return (
                f"Rotate token {self.secret_identifier} before "
                f"{self.expires_at.isoformat()}."
            )
        return f"No action needed until {self.due_at.isoformat()}."

    def to_dict(self) -> dict:
        return {
            "secret_identifier": self.secret_identifier,
            "status": self.status.value,
            "due_at": self.due_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "grace_period_days": self.grace_period / timedelta(days=1),
            "recommended_action": self.recommended_action,
        }


@dataclass(frozen=True)
class PolicyConflict:
    """Constraints that the recommended method cannot satisfy together."""

    flags: tuple[str, ...]
    description: str

    def to_dict(self) -> dict:
        return {"flags": list(self.flags), "description": self.description}


@dataclass(frozen=True)
class Recommendation:
    """Advisory result of the method decision."""

    kind: AuthMethodKind
    rationale: str
    rule: str
    required_scopes: frozenset[str] = frozenset()
    conflict: PolicyConflict | None = None

    @property
    def has_conflict(self) -> bool:
        return self.conflict is not None

    def raise_for_conflict(self) -> None:
        """Raise PolicyConflictError if the constraints clash."""
        if self.conflict is not None:
            raise PolicyConflictError(self.conflict)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "rationale": self.rationale,
            "rule": self.rule,
            "required_scopes": sorted(self.required_scopes),
            "conflict": self.conflict.to_dict() if self.conflict else None,
        }


@dataclass(frozen=True)
class RotationRecord:
    """Outcome of a rotation, with the follow-ups left to the operator."""

    previous_secret_identifier: str
    new_secret_identifier: str
    rotated_at: datetime
    follow_up_actions: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "previous_secret_identifier": self.previous_secret_identifier,
            "new_secret_identifier": self.new_secret_identifier,
            "rotated_at": self.rotated_at.isoformat(),
            "follow_up_actions": list(self.follow_up_actions),
        }
