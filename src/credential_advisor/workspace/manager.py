"""🏢 Workspace Manager - Create, load, and bind workspaces to repositories."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path

from credential_advisor.advisory import AdvisoryRequest, AdvisoryResponse, advise
from credential_advisor.policy import (
    AuthenticationMethod,
    HostRebindError,
    InvalidInputError,
    PolicyFlags,
    RepositoryTarget,
)
from credential_advisor.policy.providers import normalize_host, parse_host_from_url
from credential_advisor.settings import get_settings

from .config import CredentialConfig, PolicyConfig, RepositoryConfig, WorkspaceConfig

logger = logging.getLogger(__name__)


class Workspace:
    """A development workspace bound to one Git repository.

    The repository host is fixed at creation; the workspace holds exactly
    one active authentication method at a time.

    Example:
        workspace = Workspace.load("analytics")
        response = workspace.advise()
        print(response.recommendation.rationale)
    """

    def __init__(self, path: Path, config: WorkspaceConfig):
        self.path = path
        self.config = config

    @classmethod
    def load(cls, name_or_path: str | Path) -> Workspace:
        """Load a workspace by name or path.

        Args:
            name_or_path: Workspace name (looked up in workspaces/) or full path

        Returns:
            Loaded Workspace instance
        """
        path = Path(name_or_path)

        # If not a path, look up in standard locations
        if not path.exists():
            path = _find_workspace(str(name_or_path))

        config = WorkspaceConfig.from_directory(path)
        return cls(path=path, config=config)

    @classmethod
    def create(
        cls,
        name: str,
        target: RepositoryTarget,
        base_dir: Path | str | None = None,
        url: str | None = None,
        branch: str = "main",
        flags: PolicyFlags | None = None,
        description: str = "",
    ) -> Workspace:
        """Create a new workspace directory with a workspace.yaml.

        Args:
            name: Workspace name
            target: Repository the workspace binds to
            base_dir: Parent directory (default: settings.workspaces_dir)
            url: Optional clone URL; must point at target.host
            branch: Branch the workspace tracks
            flags: Organizational constraints
            description: Optional description

        Returns:
            Created Workspace instance
        """
        if url and parse_host_from_url(url) != target.host:
            raise InvalidInputError(
                "url", f"does not point at the target host {target.host}"
            )

        base_dir = Path(base_dir) if base_dir is not None else _get_workspaces_dir()
        workspace_dir = base_dir / name

        if (workspace_dir / "workspace.yaml").exists():
            raise FileExistsError(f"Workspace '{name}' already exists in {base_dir}")

        workspace_dir.mkdir(parents=True, exist_ok=True)

        flags = flags or PolicyFlags()
        config = WorkspaceConfig(
            name=name,
            description=description,
            repository=RepositoryConfig(
                host=target.host,
                url=url,
                branch=branch,
                is_private=target.is_private,
                requires_sso=target.requires_sso,
            ),
            policy=PolicyConfig(
                secrets_forbidden=flags.secrets_forbidden,
                is_automated_process=flags.is_automated_process,
            ),
        )
        config.to_yaml(workspace_dir / "workspace.yaml")

        logger.info("Created workspace %s bound to %s", name, target.host)
        return cls(path=workspace_dir, config=config)

    @property
    def name(self) -> str:
        """Workspace name."""
        return self.config.name

    @property
    def target(self) -> RepositoryTarget:
        return self.config.repository.to_target()

    @property
    def flags(self) -> PolicyFlags:
        return self.config.policy.to_flags()

    @property
    def credential(self) -> AuthenticationMethod | None:
        """The active authentication method, if one is configured."""
        if self.config.credential is None:
            return None
        return self.config.credential.to_method()

    def bind_credential(self, method: AuthenticationMethod) -> None:
        """Make ``method`` the single active method and persist it."""
        previous = self.config.credential
        self.config.credential = CredentialConfig.from_method(method)
        self.save()
        logger.info(
            "Workspace %s credential: %s → %s",
            self.name,
            previous.kind if previous else "none",
            method.kind.value,
        )

    def check_host(self, host: str) -> None:
        """Check a host against the bound one; the binding never changes.

        Raises:
            HostRebindError: If ``host`` differs from the bound host
        """
        new_host = normalize_host(host)
        if new_host != self.target.host:
            raise HostRebindError(
                f"Workspace '{self.name}' is bound to {self.target.host}; "
                f"create a new workspace to use {new_host}."
            )

    def advise(
        self,
        now: datetime | None = None,
        grace_period: timedelta | None = None,
        strict: bool = False,
    ) -> AdvisoryResponse:
        """Run the advisory for this workspace's repository and credential."""
        request = AdvisoryRequest(
            target=self.target,
            flags=self.flags,
            current_method=self.credential,
        )
        return advise(request, now=now, grace_period=grace_period, strict=strict)

    def save(self) -> None:
        self.config.to_yaml(self.path / "workspace.yaml")

    def __repr__(self) -> str:
        return f"Workspace(name={self.name!r}, host={self.target.host!r})"


def _get_workspaces_dir() -> Path:
    """Get the default workspaces directory."""
    return Path(get_settings().workspaces_dir)


def _find_workspace(name: str) -> Path:
    """Find a workspace by name in the workspaces directory."""
    base = _get_workspaces_dir()
    path = base / name

    if path.exists():
        return path

    raise FileNotFoundError(
        f"Workspace '{name}' not found in {base}. "
        f"Available workspaces: {list_workspaces()}"
    )


def list_workspaces(base_dir: Path | str | None = None) -> list[str]:
    """List all available workspaces."""
    base = Path(base_dir) if base_dir is not None else _get_workspaces_dir()
    if not base.exists():
        return []

    workspaces = []
    for path in base.iterdir():
        if path.is_dir() and (path / "workspace.yaml").exists():
            workspaces.append(path.name)

    return sorted(workspaces)
