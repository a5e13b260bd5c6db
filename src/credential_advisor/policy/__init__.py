"""🔐 Credential Policy - Method selection and rotation tracking.

Both entry points are pure functions of their inputs:

    from credential_advisor.policy import recommend_method, evaluate_rotation

    rec = recommend_method(RepositoryTarget(host="github.com"))
    obligation = evaluate_rotation(method, now=datetime.now(timezone.utc))
"""

from .advisor import RULES, PolicyRule, recommend_method
from .errors import (
    AdvisorError,
    HostRebindError,
    InvalidInputError,
    PolicyConflictError,
)
from .models import (
    AuthenticationMethod,
    AuthMethodKind,
    OAuthMethod,
    PolicyConflict,
    PolicyFlags,
    Recommendation,
    RepositoryTarget,
    RotationObligation,
    RotationRecord,
    RotationStatus,
    TokenLifecycleState,
    TokenSecretMethod,
)
from .providers import ProviderFamily, detect_provider, required_scopes
from .rotation import evaluate_rotation, lifecycle_state, rotate

__all__ = [
    # Decision
    "recommend_method",
    "RULES",
    "PolicyRule",
    # Rotation
    "evaluate_rotation",
    "lifecycle_state",
    "rotate",
    # Model
    "AuthenticationMethod",
    "AuthMethodKind",
    "OAuthMethod",
    "TokenSecretMethod",
    "PolicyFlags",
    "PolicyConflict",
    "Recommendation",
    "RepositoryTarget",
    "RotationObligation",
    "RotationRecord",
    "RotationStatus",
    "TokenLifecycleState",
    # Providers
    "ProviderFamily",
    "detect_provider",
    "required_scopes",
    # Errors
    "AdvisorError",
    "InvalidInputError",
    "PolicyConflictError",
    "HostRebindError",
]
