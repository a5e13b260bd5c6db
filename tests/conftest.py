"""🧪 Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from credential_advisor.policy import RepositoryTarget, TokenSecretMethod
from credential_advisor.settings import get_settings


@pytest.fixture
def expires_at():
    """Fixed token expiry used across rotation tests."""
    return datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def token_method(expires_at):
    """A 60-day token secret with the GitHub repo scope."""
    return TokenSecretMethod(
        secret_identifier="vault://git/analytics",
        scopes=frozenset({"repo"}),
        created_at=expires_at - timedelta(days=60),
        expires_at=expires_at,
    )


@pytest.fixture
def github_target():
    return RepositoryTarget(host="github.com")


@pytest.fixture
def test_workspace(tmp_path):
    """Create a temporary workspace bound to github.com."""
    from credential_advisor.workspace.manager import Workspace

    return Workspace.create(
        name="test",
        target=RepositoryTarget(host="github.com"),
        base_dir=tmp_path,
        url="https://github.com/acme/test.git",
        description="Test workspace",
    )


@pytest.fixture
def sample_workspace_yaml():
    """Sample workspace.yaml with a token credential."""
    return """
name: analytics
description: "Analytics notebooks"

repository:
  url: git@github.internal.example.com:acme/analytics.git
  branch: develop

policy:
  secrets_forbidden: false
  is_automated_process: true

credential:
  kind: token_secret
  secret_identifier: vault://git/analytics
  scopes: [repo]
  created_at: 2026-01-01T00:00:00Z
  expires_at: 2026-03-01T00:00:00Z
"""


# Environment setup for tests
@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch, tmp_path):
    """Set up environment variables for tests."""
    for name in (
        "CRED_GRACE_PERIOD_DAYS",
        "CRED_MAX_TOKEN_LIFETIME_DAYS",
        "CRED_LOG_LEVEL",
        "CRED_WORKSPACE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CRED_WORKSPACES_DIR", str(tmp_path / "workspaces"))

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
