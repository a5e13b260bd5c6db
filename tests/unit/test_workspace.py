"""🧪 Tests for Workspace management."""

import subprocess
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from credential_advisor.policy import (
    AuthMethodKind,
    HostRebindError,
    InvalidInputError,
    OAuthMethod,
    PolicyFlags,
    RepositoryTarget,
    RotationStatus,
    TokenSecretMethod,
)
from credential_advisor.workspace import git_sync
from credential_advisor.workspace.config import (
    CredentialConfig,
    RepositoryConfig,
    WorkspaceConfig,
)
from credential_advisor.workspace.manager import Workspace, list_workspaces


class TestWorkspaceConfig:
    """Tests for WorkspaceConfig."""

    def test_create_minimal_config(self):
        """Test creating config with minimal required fields."""
        config = WorkspaceConfig(
            name="test",
            repository=RepositoryConfig(host="github.com"),
        )

        assert config.name == "test"
        assert config.repository.branch == "main"
        assert config.policy.secrets_forbidden is False
        assert config.credential is None

    def test_host_derived_from_url(self):
        config = RepositoryConfig(url="git@gitlab.example.com:team/repo.git")
        assert config.host == "gitlab.example.com"

    def test_host_is_normalized(self):
        assert RepositoryConfig(host="  GitHub.com. ").host == "github.com"

    def test_host_and_url_must_agree(self):
        """A url on another host than the declared one is rejected."""
        with pytest.raises(ValidationError, match="Invalid url"):
            RepositoryConfig(host="github.com", url="git@gitlab.example.com:team/repo.git")

        config = RepositoryConfig(host="GitHub.com", url="https://github.com/acme/repo.git")
        assert config.host == "github.com"

    def test_repository_needs_host_or_url(self):
        with pytest.raises(ValidationError):
            RepositoryConfig()

    def test_token_credential_requires_fields(self):
        with pytest.raises(ValidationError, match="secret_identifier"):
            CredentialConfig(kind="token_secret")

    def test_from_yaml(self, tmp_path, sample_workspace_yaml):
        """Test loading config with a token credential from YAML."""
        yaml_file = tmp_path / "workspace.yaml"
        yaml_file.write_text(sample_workspace_yaml)

        config = WorkspaceConfig.from_yaml(yaml_file)

        assert config.name == "analytics"
        assert config.repository.host == "github.internal.example.com"
        assert config.repository.branch == "develop"
        assert config.policy.is_automated_process is True

        method = config.credential.to_method()
        assert isinstance(method, TokenSecretMethod)
        assert method.expires_at == datetime(2026, 3, 1, tzinfo=timezone.utc)
        assert method.scopes == frozenset({"repo"})

    def test_to_yaml_round_trip(self, tmp_path, token_method):
        """Test saving config with a credential to YAML."""
        config = WorkspaceConfig(
            name="test",
            repository=RepositoryConfig(host="github.com"),
            credential=CredentialConfig.from_method(token_method),
        )

        yaml_file = tmp_path / "workspace.yaml"
        config.to_yaml(yaml_file)

        loaded = WorkspaceConfig.from_yaml(yaml_file)
        assert loaded.credential.to_method() == token_method

    def test_from_yaml_host_url_mismatch(self, tmp_path):
        yaml_file = tmp_path / "workspace.yaml"
        yaml_file.write_text(
            "name: x\n"
            "repository:\n"
            "  host: github.com\n"
            "  url: git@gitlab.example.com:team/repo.git\n"
        )

        with pytest.raises(InvalidInputError) as exc_info:
            WorkspaceConfig.from_yaml(yaml_file)
        assert exc_info.value.field == "repository.url"

    def test_from_yaml_validation_error_names_field(self, tmp_path):
        yaml_file = tmp_path / "workspace.yaml"
        yaml_file.write_text("repository:\n  host: github.com\n")

        with pytest.raises(InvalidInputError) as exc_info:
            WorkspaceConfig.from_yaml(yaml_file)
        assert exc_info.value.field == "name"

    @pytest.mark.parametrize("content", ["", "name: [unclosed\n", "- just\n- a list\n"])
    def test_from_yaml_unreadable(self, tmp_path, content):
        """Empty, malformed or non-mapping files fail as invalid input."""
        yaml_file = tmp_path / "workspace.yaml"
        yaml_file.write_text(content)

        with pytest.raises(InvalidInputError) as exc_info:
            WorkspaceConfig.from_yaml(yaml_file)
        assert exc_info.value.field == "workspace.yaml"

    def test_from_directory_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="cred init"):
            WorkspaceConfig.from_directory(tmp_path)


class TestWorkspace:
    """Tests for Workspace class."""

    def test_create_workspace(self, tmp_path):
        """Test creating a new workspace."""
        ws = Workspace.create(
            name="my-workspace",
            target=RepositoryTarget(host="GitHub.com", requires_sso=True),
            base_dir=tmp_path,
            flags=PolicyFlags(is_automated_process=True),
        )

        assert ws.name == "my-workspace"
        assert ws.path == tmp_path / "my-workspace"
        assert (ws.path / "workspace.yaml").exists()
        assert ws.target == RepositoryTarget(host="github.com", requires_sso=True)
        assert ws.flags.is_automated_process is True
        assert ws.credential is None

    def test_create_twice_fails(self, test_workspace, tmp_path):
        with pytest.raises(FileExistsError):
            Workspace.create("test", RepositoryTarget(host="github.com"), base_dir=tmp_path)

    def test_load_workspace(self, test_workspace):
        """Test loading an existing workspace by path."""
        loaded = Workspace.load(test_workspace.path)

        assert loaded.name == "test"
        assert loaded.config.repository.url == "https://github.com/acme/test.git"

    def test_load_by_name(self):
        """Names are looked up in the configured workspaces directory."""
        Workspace.create("acme", RepositoryTarget(host="github.com"))

        assert Workspace.load("acme").name == "acme"
        assert list_workspaces() == ["acme"]

    def test_load_missing(self):
        with pytest.raises(FileNotFoundError, match="not found"):
            Workspace.load("nope")

    def test_bind_credential_replaces_active(self, test_workspace, token_method):
        """Exactly one method is active; binding replaces and persists it."""
        test_workspace.bind_credential(OAuthMethod())
        test_workspace.bind_credential(token_method)

        reloaded = Workspace.load(test_workspace.path)
        assert reloaded.credential == token_method

        reloaded.bind_credential(OAuthMethod())
        assert Workspace.load(test_workspace.path).credential == OAuthMethod()

    def test_check_same_host_allowed(self, test_workspace):
        test_workspace.check_host("GITHUB.COM")

    def test_check_other_host_rejected(self, test_workspace):
        with pytest.raises(HostRebindError, match="bound to github.com"):
            test_workspace.check_host("gitlab.com")

    def test_bound_host_cannot_be_reassigned(self, test_workspace):
        """The repository binding is frozen once the workspace exists."""
        with pytest.raises(ValidationError):
            test_workspace.config.repository.host = "gitlab.com"
        with pytest.raises(ValidationError):
            test_workspace.config.repository = RepositoryConfig(host="gitlab.com")

        test_workspace.save()
        assert Workspace.load(test_workspace.path).target.host == "github.com"

    def test_create_rejects_url_for_other_host(self, tmp_path):
        with pytest.raises(InvalidInputError) as exc_info:
            Workspace.create(
                "mismatch",
                RepositoryTarget(host="github.com"),
                base_dir=tmp_path,
                url="git@gitlab.example.com:team/repo.git",
            )

        assert exc_info.value.field == "url"
        assert not (tmp_path / "mismatch").exists()

    def test_advise(self, test_workspace, token_method, expires_at):
        test_workspace.bind_credential(token_method)

        response = test_workspace.advise(now=expires_at + timedelta(days=1))

        assert response.recommendation.kind == AuthMethodKind.OAUTH
        assert response.rotation.status == RotationStatus.OVERDUE
        assert response.warnings

    def test_list_workspaces(self, tmp_path):
        for name in ["beta", "alpha"]:
            Workspace.create(name, RepositoryTarget(host="github.com"), base_dir=tmp_path)
        (tmp_path / "not-a-workspace").mkdir()

        assert list_workspaces(tmp_path) == ["alpha", "beta"]

    def test_repr(self, test_workspace):
        assert repr(test_workspace) == "Workspace(name='test', host='github.com')"


class TestGitLookups:
    """Tests for local Git lookups."""

    @pytest.fixture
    def git_repo(self, tmp_path):
        def git(*args):
            subprocess.run(["git", *args], cwd=tmp_path, check=True, capture_output=True)

        try:
            git("init", "-b", "feature/auth")
        except (FileNotFoundError, subprocess.CalledProcessError):
            pytest.skip("git with 'init -b' support is not available")
        git(
            "-c", "user.name=test",
            "-c", "user.email=test@example.com",
            "-c", "commit.gpgsign=false",
            "commit", "--allow-empty", "-m", "init",
        )
        git("remote", "add", "origin", "git@gitlab.example.com:team/repo.git")
        return tmp_path

    def test_target_from_git_remote(self, git_repo):
        target = git_sync.target_from_git_remote(git_repo)
        assert target == RepositoryTarget(host="gitlab.example.com")

    def test_branch_and_root(self, git_repo):
        assert git_sync.get_git_branch(git_repo) == "feature/auth"
        assert git_sync.get_git_root(git_repo).resolve() == git_repo.resolve()
        assert git_sync.is_git_repo(git_repo)

    def test_outside_repo(self, tmp_path):
        assert git_sync.get_remote_url(tmp_path) is None
        assert git_sync.target_from_git_remote(tmp_path) is None

    def test_unrecognized_remote(self, monkeypatch):
        monkeypatch.setattr(git_sync, "get_remote_url", lambda *a, **kw: "???")
        assert git_sync.target_from_git_remote() is None
