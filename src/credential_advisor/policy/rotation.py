"""🔄 Token Rotation - Expiry tracking for stored credentials.

Obligations are computed on demand from ``expires_at`` and the current
time, never stored. The lifecycle is cyclic:

    ACTIVE → DUE_FOR_ROTATION → OVERDUE → (rotate) → ACTIVE → ...
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from credential_advisor.settings import get_settings

from .errors import InvalidInputError
from .models import (
    AuthenticationMethod,
    RotationObligation,
    RotationRecord,
    RotationStatus,
    TokenLifecycleState,
    TokenSecretMethod,
    as_utc,
)

logger = logging.getLogger(__name__)

# Lower bound for due_at when the grace period reaches past year 1.
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

_LIFECYCLE_BY_STATUS = {
    RotationStatus.PENDING: TokenLifecycleState.ACTIVE,
    RotationStatus.DUE: TokenLifecycleState.DUE_FOR_ROTATION,
    RotationStatus.OVERDUE: TokenLifecycleState.OVERDUE,
}


def _resolve_grace_period(grace_period: timedelta | None) -> timedelta:
    if grace_period is None:
        return get_settings().grace_period
    if grace_period < timedelta(0):
        raise InvalidInputError("grace_period", "must not be negative")
    return grace_period


def evaluate_rotation(
    method: AuthenticationMethod,
    now: datetime,
    grace_period: timedelta | None = None,
) -> RotationObligation | None:
    """Compute the rotation obligation of a method at ``now``.

    Args:
        method: Active authentication method
        now: Current time (naive values are taken as UTC)
        grace_period: Lead time before expiry (default: settings, 14 days)

    Returns:
        None for OAuth, otherwise the obligation with its status
    """
    if not isinstance(method, TokenSecretMethod):
        return None

    grace = _resolve_grace_period(grace_period)
    now = as_utc(now)
    try:
        due_at = method.expires_at - grace
    except OverflowError:
        due_at = EARLIEST

    if now >= method.expires_at:
        status = RotationStatus.OVERDUE
    elif now >= due_at:
        status = RotationStatus.DUE
    else:
        status = RotationStatus.PENDING

    return RotationObligation(
        secret_identifier=method.secret_identifier,
        expires_at=method.expires_at,
        due_at=due_at,
        grace_period=grace,
        status=status,
    )


def lifecycle_state(
    method: AuthenticationMethod,
    now: datetime,
    grace_period: timedelta | None = None,
) -> TokenLifecycleState:
    """Lifecycle state of a token secret at ``now``."""
    obligation = evaluate_rotation(method, now, grace_period)
    if obligation is None:
        raise InvalidInputError("method", "OAuth credentials have no rotation lifecycle")
    return _LIFECYCLE_BY_STATUS[obligation.status]


def rotate(
    method: AuthenticationMethod,
    new_secret_identifier: str,
    new_expires_at: datetime,
    now: datetime,
    scopes: frozenset[str] | set[str] | None = None,
) -> tuple[TokenSecretMethod, RotationRecord]:
    """Replace a token secret with a freshly issued one.

    The returned method starts a new ACTIVE cycle. Deleting the previous
    token on the provider stays with the operator and is listed in the
    record's follow-up actions.

    Raises:
        InvalidInputError: If the method is OAuth, the identifier is reused,
            or the new expiry is not in the future
    """
    if not isinstance(method, TokenSecretMethod):
        raise InvalidInputError("method", "only token secrets can be rotated")

    now = as_utc(now)
    if (new_secret_identifier or "").strip() == method.secret_identifier:
        raise InvalidInputError(
            "new_secret_identifier", "must differ from the current secret"
        )
    if as_utc(new_expires_at) <= now:
        raise InvalidInputError("new_expires_at", "must be in the future")

    rotated = TokenSecretMethod(
        secret_identifier=new_secret_identifier,
        scopes=frozenset(scopes) if scopes is not None else method.scopes,
        created_at=now,
        expires_at=new_expires_at,
    )
    record = RotationRecord(
        previous_secret_identifier=method.secret_identifier,
        new_secret_identifier=rotated.secret_identifier,
        rotated_at=now,
        follow_up_actions=(
            f"Revoke the previous token on the Git provider and delete secret "
            f"{method.secret_identifier} from the secret store.",
            f"Track the new expiry at {rotated.expires_at.isoformat()}.",
        ),
    )

    logger.info(
        "Rotated secret %s → %s", method.secret_identifier, rotated.secret_identifier
    )
    return rotated, record
