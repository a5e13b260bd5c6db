"""🔎 Local Git lookups.

Reads the branch and remote of a local checkout so a workspace can be
bound without typing the host by hand. Nothing here talks to the hosting
platform.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from credential_advisor.policy import InvalidInputError, RepositoryTarget

logger = logging.getLogger(__name__)


def _run_git(args: list[str], cwd: Path | str | None) -> str | None:
    """Run a git command and return stripped stdout, or None on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            cwd=cwd,
            timeout=5,
        )
    except (subprocess.SubprocessError, FileNotFoundError, NotADirectoryError) as e:
        logger.debug("git %s failed: %s", " ".join(args), e)
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def get_git_branch(repo_path: Path | str | None = None) -> str | None:
    """Get the current Git branch name.

    Args:
        repo_path: Path to Git repository (default: current directory)

    Returns:
        Branch name or None if not in a Git repo
    """
    branch = _run_git(["rev-parse", "--abbrev-ref", "HEAD"], repo_path)
    # HEAD means detached state
    return None if branch == "HEAD" else branch


def get_git_root(start_path: Path | str | None = None) -> Path | None:
    """Get the Git repository root directory."""
    root = _run_git(["rev-parse", "--show-toplevel"], start_path)
    return Path(root) if root else None


def is_git_repo(path: Path | str | None = None) -> bool:
    """Check if path is inside a Git repository."""
    return get_git_root(path) is not None


def get_remote_url(
    repo_path: Path | str | None = None,
    remote: str = "origin",
) -> str | None:
    """Get the URL of a Git remote.

    Example:
        get_remote_url()
        # → "git@github.com:acme/analytics.git"
    """
    return _run_git(["remote", "get-url", remote], repo_path)


def target_from_git_remote(
    repo_path: Path | str | None = None,
    remote: str = "origin",
    is_private: bool = True,
    requires_sso: bool = False,
) -> RepositoryTarget | None:
    """Build a RepositoryTarget from a local checkout's remote.

    Returns:
        RepositoryTarget, or None if there is no usable remote
    """
    url = get_remote_url(repo_path, remote)
    if not url:
        return None
    try:
        return RepositoryTarget.from_url(
            url, is_private=is_private, requires_sso=requires_sso
        )
    except InvalidInputError:
        logger.warning("Remote %s has an unrecognized URL: %s", remote, url)
        return None
