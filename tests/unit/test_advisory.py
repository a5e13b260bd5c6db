"""🧪 Tests for the advisory request/response."""

import io
import json
from datetime import timedelta

import pytest
from rich.console import Console

from credential_advisor.advisory import AdvisoryRequest, advise
from credential_advisor.policy import (
    AuthMethodKind,
    OAuthMethod,
    PolicyConflictError,
    PolicyFlags,
    RepositoryTarget,
    RotationStatus,
    TokenSecretMethod,
)
from credential_advisor.reporters import ConsoleReporter, JSONReporter


class TestAdvise:
    """Tests for advise()."""

    def test_end_to_end_enterprise_host(self, expires_at):
        """Enterprise host → token secret with the host rationale."""
        request = AdvisoryRequest(
            target=RepositoryTarget(host="github.internal.example.com", is_private=True),
            flags=PolicyFlags(secrets_forbidden=False),
        )

        response = advise(request, now=expires_at)

        assert response.recommendation.kind == AuthMethodKind.TOKEN_SECRET
        assert response.recommendation.rationale == (
            "non-github.com host requires token-based authentication."
        )
        assert response.rotation is None
        assert response.warnings == []

    def test_includes_rotation_for_token(self, token_method, expires_at):
        request = AdvisoryRequest(
            target=RepositoryTarget(host="github.com"),
            flags=PolicyFlags(is_automated_process=True),
            current_method=token_method,
        )

        response = advise(request, now=expires_at - timedelta(days=3))

        assert response.rotation.status == RotationStatus.DUE
        assert response.warnings == []
        assert response.needs_attention

    def test_oauth_current_method_has_no_rotation(self, github_target, expires_at):
        request = AdvisoryRequest(target=github_target, current_method=OAuthMethod())

        response = advise(request, now=expires_at)

        assert response.rotation is None
        assert not response.needs_attention

    def test_warns_on_method_mismatch(self, github_target, token_method, expires_at):
        """A token on an interactive github.com workspace is flagged."""
        request = AdvisoryRequest(target=github_target, current_method=token_method)

        response = advise(request, now=expires_at - timedelta(days=30))

        assert len(response.warnings) == 1
        assert "oauth is recommended" in response.warnings[0]

    def test_warns_on_missing_scopes(self, expires_at):
        method = TokenSecretMethod(
            secret_identifier="vault://git/ci",
            scopes=frozenset({"read_repository"}),
            created_at=expires_at - timedelta(days=30),
            expires_at=expires_at,
        )
        request = AdvisoryRequest(
            target=RepositoryTarget(host="gitlab.com"), current_method=method
        )

        response = advise(request, now=expires_at - timedelta(days=20))

        assert response.warnings == ["Token is missing scopes: write_repository"]

    def test_warns_on_long_lifetime(self, expires_at):
        method = TokenSecretMethod(
            secret_identifier="vault://git/ci",
            scopes=frozenset({"repo"}),
            created_at=expires_at - timedelta(days=365),
            expires_at=expires_at,
        )
        request = AdvisoryRequest(
            target=RepositoryTarget(host="github.com"),
            flags=PolicyFlags(is_automated_process=True),
            current_method=method,
        )

        response = advise(request, now=expires_at - timedelta(days=100))

        assert len(response.warnings) == 1
        assert "365 days exceeds the 90-day" in response.warnings[0]

    def test_conflict_reported(self, expires_at):
        request = AdvisoryRequest(
            target=RepositoryTarget(host="gitlab.com"),
            flags=PolicyFlags(secrets_forbidden=True),
        )

        response = advise(request, now=expires_at)

        assert response.recommendation.has_conflict
        assert response.needs_attention

    def test_strict_raises_on_conflict(self, expires_at):
        request = AdvisoryRequest(
            target=RepositoryTarget(host="gitlab.com"),
            flags=PolicyFlags(secrets_forbidden=True),
        )

        with pytest.raises(PolicyConflictError):
            advise(request, now=expires_at, strict=True)

    def test_now_defaults_to_current_time(self, github_target):
        response = advise(AdvisoryRequest(target=github_target))
        assert response.evaluated_at.tzinfo is not None


class TestReporters:
    """Tests for console and JSON reporters."""

    @pytest.fixture
    def response(self, token_method, expires_at):
        request = AdvisoryRequest(
            target=RepositoryTarget(host="github.com"),
            flags=PolicyFlags(is_automated_process=True),
            current_method=token_method,
        )
        return advise(request, now=expires_at + timedelta(days=1))

    def test_json_report(self, response):
        buffer = io.StringIO()
        JSONReporter(output=buffer).report(response, title="analytics")

        data = json.loads(buffer.getvalue())
        assert data["workspace"] == "analytics"
        assert data["recommendation"]["kind"] == "token_secret"
        assert data["rotation"]["status"] == "overdue"
        assert data["needs_attention"] is True

    def test_json_error(self):
        buffer = io.StringIO()
        JSONReporter(output=buffer).report_error("boom")

        data = json.loads(buffer.getvalue())
        assert data["error"] is True
        assert data["message"] == "boom"

    def test_console_report(self, response):
        console = Console(file=io.StringIO(), width=200, color_system=None)
        ConsoleReporter(console=console, verbose=True).report(response)

        output = console.file.getvalue()
        assert "Token secret" in output
        assert "overdue" in output
        assert "automated_process" in output

    def test_console_conflict(self, expires_at):
        request = AdvisoryRequest(
            target=RepositoryTarget(host="gitlab.com"),
            flags=PolicyFlags(secrets_forbidden=True),
        )
        console = Console(file=io.StringIO(), width=200, color_system=None)
        ConsoleReporter(console=console).report(advise(request, now=expires_at))

        assert "Policy conflict" in console.file.getvalue()
