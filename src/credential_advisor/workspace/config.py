"""🏢 Workspace Configuration - Pydantic models for workspace.yaml."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from credential_advisor.policy import (
    AuthenticationMethod,
    InvalidInputError,
    OAuthMethod,
    PolicyFlags,
    RepositoryTarget,
    TokenSecretMethod,
)
from credential_advisor.policy.providers import normalize_host, parse_host_from_url


class RepositoryConfig(BaseModel):
    """The Git repository a workspace is bound to.

    Frozen: the host cannot change once a workspace is bound to it.
    """

    model_config = ConfigDict(frozen=True)

    host: str | None = Field(
        default=None,
        description="Git host domain (derived from url when omitted)",
    )
    url: str | None = Field(default=None, description="Clone URL")
    branch: str = Field(default="main", description="Branch the workspace tracks")
    is_private: bool = Field(default=True)
    requires_sso: bool = Field(default=False)

    @model_validator(mode="before")
    @classmethod
    def _derive_host(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("host") and data.get("url"):
            data = {**data, "host": parse_host_from_url(data["url"])}
        return data

    @field_validator("host")
    @classmethod
    def _normalize_host(cls, value: str | None) -> str | None:
        return normalize_host(value) if value is not None else None

    @field_validator("url")
    @classmethod
    def _url_matches_host(cls, value: str | None, info: ValidationInfo) -> str | None:
        host = info.data.get("host")
        if value and host:
            url_host = parse_host_from_url(value)
            if url_host != host:
                raise InvalidInputError(
                    "url", f"points at {url_host} but the repository host is {host}"
                )
        return value

    @model_validator(mode="after")
    def _require_host(self) -> "RepositoryConfig":
        if not self.host:
            raise ValueError("repository needs a host or a url")
        return self

    def to_target(self) -> RepositoryTarget:
        return RepositoryTarget(
            host=self.host,
            is_private=self.is_private,
            requires_sso=self.requires_sso,
        )


class PolicyConfig(BaseModel):
    """Organizational constraints for this workspace."""

    secrets_forbidden: bool = Field(
        default=False,
        description="Organization forbids storing any secret material",
    )
    is_automated_process: bool = Field(
        default=False,
        description="Repository is used by a non-interactive process",
    )

    def to_flags(self) -> PolicyFlags:
        return PolicyFlags(
            secrets_forbidden=self.secrets_forbidden,
            is_automated_process=self.is_automated_process,
        )


class CredentialConfig(BaseModel):
    """The single active authentication method."""

    kind: Literal["oauth", "token_secret"]
    secret_identifier: str | None = Field(
        default=None,
        description="Reference into the external secret store (never the token)",
    )
    scopes: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    expires_at: datetime | None = None

    @model_validator(mode="after")
    def _check_token_fields(self) -> "CredentialConfig":
        if self.kind == "token_secret":
            missing = [
                name
                for name in ("secret_identifier", "created_at", "expires_at")
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(
                    f"token_secret credential is missing: {', '.join(missing)}"
                )
        return self

    def to_method(self) -> AuthenticationMethod:
        """Build the domain method (raises InvalidInputError on bad values)."""
        if self.kind == "oauth":
            return OAuthMethod()
        return TokenSecretMethod(
            secret_identifier=self.secret_identifier,
            scopes=frozenset(self.scopes),
            created_at=self.created_at,
            expires_at=self.expires_at,
        )

    @classmethod
    def from_method(cls, method: AuthenticationMethod) -> "CredentialConfig":
        if isinstance(method, TokenSecretMethod):
            return cls(
                kind="token_secret",
                secret_identifier=method.secret_identifier,
                scopes=sorted(method.scopes),
                created_at=method.created_at,
                expires_at=method.expires_at,
            )
        return cls(kind="oauth")


class WorkspaceConfig(BaseModel):
    """Complete workspace configuration.

    Loaded from workspace.yaml in the workspace directory.

    Example:
        name: analytics
        description: "Analytics notebooks"

        repository:
          url: https://github.com/acme/analytics.git
          branch: main

        policy:
          secrets_forbidden: false
          is_automated_process: true

        credential:
          kind: token_secret
          secret_identifier: vault://git/analytics
          scopes: [repo]
          created_at: 2026-01-01T00:00:00Z
          expires_at: 2026-04-01T00:00:00Z
    """

    name: str = Field(description="Workspace identifier")
    version: str = Field(default="1.0", description="Workspace config version")
    description: str = Field(default="", description="Workspace description")

    repository: RepositoryConfig = Field(description="Bound Git repository", frozen=True)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    credential: CredentialConfig | None = Field(
        default=None,
        description="Active authentication method (none until configured)",
    )

    @classmethod
    def from_yaml(cls, path: Path | str) -> "WorkspaceConfig":
        """Load configuration from a YAML file.

        Raises:
            InvalidInputError: If the file is not valid YAML or fails validation
        """
        source = Path(path).name
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise InvalidInputError(source, f"not valid YAML: {e}") from e

        if not isinstance(data, dict):
            raise InvalidInputError(source, "expected a mapping of workspace settings")

        try:
            return cls(**data)
        except ValidationError as e:
            error = e.errors()[0]
            field = ".".join(str(part) for part in error["loc"]) or source
            raise InvalidInputError(field, error["msg"]) from e

    @classmethod
    def from_directory(cls, workspace_dir: Path | str) -> "WorkspaceConfig":
        """Load configuration from a workspace directory."""
        workspace_dir = Path(workspace_dir)
        config_path = workspace_dir / "workspace.yaml"

        if not config_path.exists():
            raise FileNotFoundError(
                f"No workspace.yaml found in {workspace_dir}. "
                f"Run 'cred init' to create one."
            )

        return cls.from_yaml(config_path)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(
                self.model_dump(mode="json", exclude_none=True),
                f,
                default_flow_style=False,
                sort_keys=False,
            )
