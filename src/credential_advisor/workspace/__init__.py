"""🏢 Workspaces - Development workspaces bound to a Git repository.

Each workspace has:
- One repository (host fixed once bound)
- One active authentication method
- Its own organizational policy flags

Binding from a local checkout:
    from credential_advisor.workspace import Workspace, target_from_git_remote

    target = target_from_git_remote(".")
    Workspace.create("analytics", target)
"""

from .config import (
    CredentialConfig,
    PolicyConfig,
    RepositoryConfig,
    WorkspaceConfig,
)
from .git_sync import (
    get_git_branch,
    get_git_root,
    get_remote_url,
    is_git_repo,
    target_from_git_remote,
)
from .manager import Workspace, list_workspaces

__all__ = [
    "Workspace",
    "WorkspaceConfig",
    "RepositoryConfig",
    "PolicyConfig",
    "CredentialConfig",
    "list_workspaces",
    # Git lookups
    "get_git_branch",
    "get_git_root",
    "get_remote_url",
    "is_git_repo",
    "target_from_git_remote",
]
