"""🔐 Credential Advisor - Git credentials for development workspaces.

Quick Start:
    from credential_advisor import advise, AdvisoryRequest
    from credential_advisor.policy import RepositoryTarget, PolicyFlags

    response = advise(AdvisoryRequest(
        target=RepositoryTarget(host="github.com"),
        flags=PolicyFlags(is_automated_process=True),
    ))
    response.recommendation.kind       # token_secret
    response.recommendation.rationale  # why

Rotation tracking:
    from credential_advisor.policy import TokenSecretMethod, evaluate_rotation

    obligation = evaluate_rotation(method, now)
    obligation.status                  # pending / due / overdue
"""

__version__ = "1.0.0"

from credential_advisor.advisory import AdvisoryRequest, AdvisoryResponse, advise

__all__ = ["advise", "AdvisoryRequest", "AdvisoryResponse", "__version__"]
