"""📋 Advisory - Operator-facing request/response around the policy core.

Example:
    request = AdvisoryRequest(
        target=RepositoryTarget(host="github.internal.example.com"),
        flags=PolicyFlags(secrets_forbidden=False),
    )
    response = advise(request)
    response.recommendation.kind       # → AuthMethodKind.TOKEN_SECRET
    response.recommendation.rationale  # → "non-github.com host requires ..."
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from credential_advisor.policy import (
    AuthenticationMethod,
    PolicyFlags,
    Recommendation,
    RepositoryTarget,
    RotationObligation,
    TokenSecretMethod,
    evaluate_rotation,
    recommend_method,
)
from credential_advisor.policy.models import utcnow
from credential_advisor.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvisoryRequest:
    """What the operator knows about the repository and the organization."""

    target: RepositoryTarget
    flags: PolicyFlags = field(default_factory=PolicyFlags)
    current_method: AuthenticationMethod | None = None


@dataclass
class AdvisoryResponse:
    """Recommendation plus the lifecycle state of the current credential."""

    target: RepositoryTarget
    recommendation: Recommendation
    evaluated_at: datetime
    rotation: RotationObligation | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def needs_attention(self) -> bool:
        """True if the operator has something to act on."""
        return bool(
            self.warnings
            or self.recommendation.has_conflict
            or (self.rotation is not None and self.rotation.status.rank > 0)
        )

    def to_dict(self) -> dict:
        return {
            "target": {
                "host": self.target.host,
                "is_private": self.target.is_private,
                "requires_sso": self.target.requires_sso,
            },
            "evaluated_at": self.evaluated_at.isoformat(),
            "recommendation": self.recommendation.to_dict(),
            "rotation": self.rotation.to_dict() if self.rotation else None,
            "warnings": list(self.warnings),
        }


def advise(
    request: AdvisoryRequest,
    now: datetime | None = None,
    grace_period: timedelta | None = None,
    strict: bool = False,
) -> AdvisoryResponse:
    """Build the advisory response for one request.

    Args:
        request: Target, policy flags and optional current method
        now: Evaluation time (default: current UTC time)
        grace_period: Rotation lead time (default: settings)
        strict: Raise PolicyConflictError instead of reporting the conflict

    Returns:
        AdvisoryResponse
    """
    now = now or utcnow()
    recommendation = recommend_method(request.target, request.flags)
    if strict:
        recommendation.raise_for_conflict()

    current = request.current_method
    rotation = (
        evaluate_rotation(current, now, grace_period) if current is not None else None
    )

    response = AdvisoryResponse(
        target=request.target,
        recommendation=recommendation,
        evaluated_at=now,
        rotation=rotation,
        warnings=_collect_warnings(recommendation, current),
    )

    logger.info(
        "Advisory for %s: %s (%d warning(s))",
        request.target.host,
        recommendation.kind.value,
        len(response.warnings),
    )
    return response


def _collect_warnings(
    recommendation: Recommendation,
    current: AuthenticationMethod | None,
) -> list[str]:
    """Compare the active method against the recommendation."""
    warnings: list[str] = []
    if current is None:
        return warnings

    if current.kind != recommendation.kind:
        warnings.append(
            f"Active method is {current.kind.value} but {recommendation.kind.value} "
            f"is recommended: {recommendation.rationale}"
        )

    if isinstance(current, TokenSecretMethod):
        missing = recommendation.required_scopes - current.scopes
        if missing:
            warnings.append(f"Token is missing scopes: {', '.join(sorted(missing))}")

        max_lifetime = get_settings().max_token_lifetime
        if current.lifetime > max_lifetime:
            warnings.append(
                f"Token lifetime of {current.lifetime.days} days exceeds the "
                f"{max_lifetime.days}-day rotation cadence"
            )

    return warnings
