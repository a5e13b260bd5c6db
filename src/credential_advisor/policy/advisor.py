"""🧭 Method Advisor - Pick OAuth or a stored token for a repository.

The decision is an ordered rule table; the first matching rule wins:

    1. host is not github.com        → token secret (OAuth unsupported)
    2. storing secrets is forbidden  → OAuth
    3. automated, non-interactive    → token secret (shared credential)
    4. otherwise                     → OAuth (lowest operational burden)

Example:
    rec = recommend_method(
        RepositoryTarget(host="github.com"),
        PolicyFlags(is_automated_process=True),
    )
    rec.kind       # → AuthMethodKind.TOKEN_SECRET
    rec.rationale  # → "automated non-interactive process needs ..."
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from .models import (
    AuthMethodKind,
    PolicyConflict,
    PolicyFlags,
    Recommendation,
    RepositoryTarget,
)
from .providers import GITHUB_DOT_COM, required_scopes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicyRule:
    """One row of the decision table."""

    name: str
    kind: AuthMethodKind
    rationale: str
    matches: Callable[[RepositoryTarget, PolicyFlags], bool]


RULES: tuple[PolicyRule, ...] = (
    PolicyRule(
        name="non_github_host",
        kind=AuthMethodKind.TOKEN_SECRET,
        rationale="non-github.com host requires token-based authentication.",
        matches=lambda target, flags: target.host != GITHUB_DOT_COM,
    ),
    PolicyRule(
        name="secrets_forbidden",
        kind=AuthMethodKind.OAUTH,
        rationale="organization policy forbids storing secret material.",
        matches=lambda target, flags: flags.secrets_forbidden,
    ),
    PolicyRule(
        name="automated_process",
        kind=AuthMethodKind.TOKEN_SECRET,
        rationale="automated non-interactive process needs a shared stored credential.",
        matches=lambda target, flags: flags.is_automated_process,
    ),
    PolicyRule(
        name="interactive_default",
        kind=AuthMethodKind.OAUTH,
        rationale="interactive users on github.com default to OAuth (lowest operational burden).",
        matches=lambda target, flags: True,
    ),
)


def recommend_method(
    target: RepositoryTarget,
    flags: PolicyFlags | None = None,
) -> Recommendation:
    """Recommend an authentication method for a repository.

    Args:
        target: Repository to connect
        flags: Organizational constraints (default: none set)

    Returns:
        Recommendation with kind, rationale and any policy conflict
    """
    flags = flags or PolicyFlags()
    rule = next(r for r in RULES if r.matches(target, flags))

    scopes = (
        required_scopes(target.host)
        if rule.kind == AuthMethodKind.TOKEN_SECRET
        else frozenset()
    )
    conflict = detect_conflict(rule, flags)

    logger.debug(
        "Recommended %s for host %s (rule=%s)", rule.kind.value, target.host, rule.name
    )
    if conflict:
        logger.warning("Policy conflict for host %s: %s", target.host, conflict.description)

    return Recommendation(
        kind=rule.kind,
        rationale=rule.rationale,
        rule=rule.name,
        required_scopes=scopes,
        conflict=conflict,
    )


def detect_conflict(rule: PolicyRule, flags: PolicyFlags) -> PolicyConflict | None:
    """Return the conflict between the chosen rule and the stated constraints."""
    if rule.kind == AuthMethodKind.TOKEN_SECRET and flags.secrets_forbidden:
        clashing = ["secrets_forbidden", "non_github_host"]
        if flags.is_automated_process:
            clashing.append("is_automated_process")
        return PolicyConflict(
            flags=tuple(clashing),
            description=(
                "Only token-based authentication is available for this host, "
                "but organization policy forbids storing secret material."
            ),
        )

    if rule.kind == AuthMethodKind.OAUTH and flags.is_automated_process:
        return PolicyConflict(
            flags=("secrets_forbidden", "is_automated_process"),
            description=(
                "OAuth requires an interactive login that an automated process "
                "cannot complete, but storing a token is forbidden."
            ),
        )

    return None
