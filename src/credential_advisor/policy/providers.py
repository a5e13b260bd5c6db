"""🌐 Git host classification and URL parsing.

Maps a repository host to a provider family, which drives the token
scopes a stored credential must carry.
"""

from __future__ import annotations

import re
from enum import Enum

from .errors import InvalidInputError

GITHUB_DOT_COM = "github.com"

GIT_SSH_URL_REGEX = re.compile(
    r"^git\+ssh://git@(?P<host>[^/:]+)(?::(?P<port>\d+))?/(?P<path>[^/@]+?(?:/[^/@]+?)+?)(?:\.git)?/?$"
)
"""git+ssh URL with git user, optional numeric port and multi-segment path."""

GIT_SCP_URL_REGEX = re.compile(
    r"^(?:[\w.-]+@)?(?P<host>[^/:@]+):(?P<path>[^/@][^@]*?)(?:\.git)?/?$"
)
"""scp-style URL such as git@github.com:acme/repo.git."""

GIT_HTTPS_URL_REGEX = re.compile(
    r"^https?://(?:[^/@]+@)?(?P<host>[^/:]+)(?::(?P<port>\d+))?/(?P<path>[^/@]+?(?:/[^/@]+?)+?)(?:\.git)?/?$"
)
"""HTTP(S) URL with optional userinfo, port and multi-segment path."""

_HOST_INVALID_CHARS = re.compile(r"[\s/:@]")


class ProviderFamily(str, Enum):
    """Git hosting provider families."""

    GITHUB = "github"
    GITHUB_ENTERPRISE = "github_enterprise"
    GITLAB = "gitlab"
    OTHER = "other"


# Token scopes a stored credential needs for clone/commit/push/pull.
REQUIRED_TOKEN_SCOPES: dict[ProviderFamily, frozenset[str]] = {
    ProviderFamily.GITHUB: frozenset({"repo"}),
    ProviderFamily.GITHUB_ENTERPRISE: frozenset({"repo"}),
    ProviderFamily.GITLAB: frozenset({"read_repository", "write_repository"}),
    ProviderFamily.OTHER: frozenset(),
}


def normalize_host(host: str) -> str:
    """Normalize a bare host name.

    Strips whitespace and a trailing dot and lower-cases the result.

    Raises:
        InvalidInputError: If the host is empty or looks like a URL
    """
    if host is None:
        raise InvalidInputError("host", "host is required")
    normalized = str(host).strip().lower().rstrip(".")
    if not normalized:
        raise InvalidInputError("host", "host must not be empty")
    if _HOST_INVALID_CHARS.search(normalized):
        raise InvalidInputError(
            "host",
            f"expected a bare domain, got {host!r} (use a repository URL instead)",
        )
    return normalized


def parse_host_from_url(url: str) -> str:
    """Extract the host from a Git remote URL.

    Examples:
        parse_host_from_url("https://github.com/acme/repo.git") → "github.com"
        parse_host_from_url("git@gitlab.example.com:team/repo.git") → "gitlab.example.com"

    Raises:
        InvalidInputError: If the URL is not a recognizable Git remote
    """
    candidate = (url or "").strip()
    for regex in (GIT_HTTPS_URL_REGEX, GIT_SSH_URL_REGEX, GIT_SCP_URL_REGEX):
        match = regex.match(candidate)
        if match:
            return normalize_host(match.group("host"))
    raise InvalidInputError("url", f"not a recognizable Git remote URL: {url!r}")


def detect_provider(host: str) -> ProviderFamily:
    """Classify a normalized host into a provider family."""
    if host == GITHUB_DOT_COM:
        return ProviderFamily.GITHUB
    if "github" in host:
        return ProviderFamily.GITHUB_ENTERPRISE
    if "gitlab" in host:
        return ProviderFamily.GITLAB
    return ProviderFamily.OTHER


def required_scopes(host: str) -> frozenset[str]:
    """Token scopes a stored credential for ``host`` should carry."""
    return REQUIRED_TOKEN_SCOPES[detect_provider(host)]
