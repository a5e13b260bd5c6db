"""⚙️ Settings - Environment-based advisor configuration."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-based settings.

    Every field can be overridden with a ``CRED_``-prefixed variable,
    e.g. ``CRED_GRACE_PERIOD_DAYS=21``.
    """

    model_config = SettingsConfigDict(env_prefix="CRED_", case_sensitive=False)

    # Rotation
    grace_period_days: int = Field(
        default=14,
        ge=0,
        description="Lead time before expiry at which rotation becomes due",
    )
    max_token_lifetime_days: int = Field(
        default=90,
        ge=1,
        description="Longest token lifetime accepted without a warning",
    )

    # Workspaces
    workspaces_dir: str = Field(default="workspaces")
    workspace: str = Field(default="default")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="WARNING")

    @property
    def grace_period(self) -> timedelta:
        return timedelta(days=self.grace_period_days)

    @property
    def max_token_lifetime(self) -> timedelta:
        return timedelta(days=self.max_token_lifetime_days)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings from environment."""
    return Settings()
