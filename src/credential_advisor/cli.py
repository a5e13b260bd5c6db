#!/usr/bin/env python3
"""
🔐 Credential Advisor CLI - Pick and track Git credentials for workspaces.

Usage:
    cred recommend --host <host>     Recommend OAuth or a stored token
    cred rotation --secret-id <id>   Check a token's rotation status
    cred init <name> --host <host>   Bind a new workspace to a repository
    cred check                       Advise on the current workspace
    cred rotate --secret-id <id>     Record a rotated token for a workspace
    cred list                        List workspaces
    cred --help                      Show help
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console

from credential_advisor import __version__
from credential_advisor.advisory import AdvisoryRequest, advise
from credential_advisor.log import setup_logging
from credential_advisor.policy import (
    AdvisorError,
    InvalidInputError,
    PolicyConflictError,
    PolicyFlags,
    RepositoryTarget,
    TokenSecretMethod,
    evaluate_rotation,
    rotate,
)
from credential_advisor.policy.models import as_utc, utcnow
from credential_advisor.reporters import ConsoleReporter, JSONReporter
from credential_advisor.settings import get_settings

console = Console()
logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_CONFLICT = 2


def parse_timestamp(value: str | None, field: str) -> datetime | None:
    """Parse an ISO-8601 date or datetime (naive values are UTC)."""
    if value is None:
        return None
    try:
        return as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError as e:
        raise InvalidInputError(field, f"expected an ISO-8601 timestamp, got {value!r}") from e


def get_reporter(output: str, verbose: bool = False) -> ConsoleReporter | JSONReporter:
    if output == "json":
        return JSONReporter(pretty=verbose)
    return ConsoleReporter(console=console, verbose=verbose)


def get_workspace_path() -> Path:
    """Get the current workspace path from settings or the current directory."""
    cwd = Path.cwd()
    if (cwd / "workspace.yaml").exists():
        return cwd

    # Check parent directories
    for parent in cwd.parents:
        if (parent / "workspace.yaml").exists():
            return parent

    return Path(get_settings().workspaces_dir) / get_settings().workspace


def _resolve_workspace_path(workspace: str | None) -> Path:
    """Resolve workspace name/path to actual path."""
    if not workspace:
        return get_workspace_path()

    workspace_path = Path(workspace)
    if not workspace_path.is_absolute() and not workspace_path.exists():
        workspace_path = Path(get_settings().workspaces_dir) / workspace
    return workspace_path


def recommend(
    host: str | None,
    url: str | None = None,
    secrets_forbidden: bool = False,
    automated: bool = False,
    strict: bool = False,
    output: str = "console",
    verbose: bool = False,
) -> None:
    """Recommend an authentication method for a repository."""
    if url:
        target = RepositoryTarget.from_url(url)
    else:
        target = RepositoryTarget(host=host)

    request = AdvisoryRequest(
        target=target,
        flags=PolicyFlags(
            secrets_forbidden=secrets_forbidden,
            is_automated_process=automated,
        ),
    )
    response = advise(request, strict=strict)
    get_reporter(output, verbose).report(response)


def check_rotation(
    secret_id: str,
    expires_at: str,
    created_at: str | None = None,
    now: str | None = None,
    grace_days: int | None = None,
    output: str = "console",
) -> None:
    """Report the rotation status of a stored token."""
    expires = parse_timestamp(expires_at, "expires_at")
    created = parse_timestamp(created_at, "created_at")
    method = TokenSecretMethod(
        secret_identifier=secret_id,
        expires_at=expires,
        created_at=created or min(utcnow(), expires - timedelta(seconds=1)),
    )
    try:
        grace = timedelta(days=grace_days) if grace_days is not None else None
    except OverflowError as e:
        raise InvalidInputError("grace_days", f"{grace_days} days is out of range") from e
    obligation = evaluate_rotation(method, parse_timestamp(now, "now") or utcnow(), grace)
    get_reporter(output).report_rotation(obligation)

    if obligation.status.rank > 0:
        sys.exit(EXIT_ERROR)


def init_workspace(
    name: str,
    host: str | None = None,
    url: str | None = None,
    from_git: bool = False,
    branch: str | None = None,
    secrets_forbidden: bool = False,
    automated: bool = False,
    path: Path | None = None,
) -> None:
    """Create a workspace bound to a repository."""
    from credential_advisor.workspace import Workspace, get_git_branch, get_remote_url

    if from_git:
        url = get_remote_url(Path.cwd())
        if not url:
            raise InvalidInputError("url", "no 'origin' remote found in the current directory")
        branch = branch or get_git_branch(Path.cwd())

    if url:
        target = RepositoryTarget.from_url(url)
    else:
        target = RepositoryTarget(host=host)

    workspace = Workspace.create(
        name,
        target,
        base_dir=path,
        url=url,
        branch=branch or "main",
        flags=PolicyFlags(
            secrets_forbidden=secrets_forbidden,
            is_automated_process=automated,
        ),
    )
    console.print(
        f"[green]✓[/green] Workspace [cyan]{workspace.name}[/cyan] bound to "
        f"[cyan]{target.host}[/cyan] at {workspace.path}"
    )
    response = workspace.advise()
    ConsoleReporter(console=console).report(response, title=f"🔐 {workspace.name}")


def check_workspace(
    workspace: str | None = None,
    now: str | None = None,
    strict: bool = False,
    output: str = "console",
    verbose: bool = False,
) -> None:
    """Advise on a workspace's repository and active credential."""
    from credential_advisor.workspace import Workspace

    ws = Workspace.load(_resolve_workspace_path(workspace))
    response = ws.advise(now=parse_timestamp(now, "now"), strict=strict)
    get_reporter(output, verbose).report(response, title=ws.name)

    if response.needs_attention:
        sys.exit(EXIT_ERROR)


def rotate_workspace_secret(
    secret_id: str,
    expires_at: str,
    workspace: str | None = None,
    output: str = "console",
) -> None:
    """Replace the workspace's stored token with a new one."""
    from credential_advisor.workspace import Workspace

    ws = Workspace.load(_resolve_workspace_path(workspace))
    rotated, record = rotate(
        ws.credential,
        new_secret_identifier=secret_id,
        new_expires_at=parse_timestamp(expires_at, "expires_at"),
        now=utcnow(),
    )
    ws.bind_credential(rotated)
    get_reporter(output).report_rotation_record(record)


def list_all() -> None:
    from credential_advisor.workspace import list_workspaces

    names = list_workspaces()
    if not names:
        console.print("[dim]No workspaces found.[/dim]")
    for name in names:
        console.print(f"  • [cyan]{name}[/cyan]")


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        "-o",
        choices=["console", "json"],
        default="console",
        help="Output format (default: console)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show more detail")


def _add_policy_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--secrets-forbidden",
        action="store_true",
        help="Organization forbids storing secret material",
    )
    parser.add_argument(
        "--automated",
        action="store_true",
        help="Repository is used by a non-interactive process",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cred",
        description="🔐 Credential Advisor - Git credentials for development workspaces",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cred recommend --host github.com                   OAuth for interactive users
  cred recommend --host github.com --automated       Token for a CI job
  cred recommend --url git@gitlab.acme.io:t/r.git    Token for a non-github.com host
  cred rotation --secret-id vault://git/ci --expires-at 2026-12-01
  cred init analytics --from-git                     Bind to the current checkout
  cred check -w analytics -o json                    Advisory as JSON
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: CRED_LOG_LEVEL or WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # recommend command
    rec_parser = subparsers.add_parser("recommend", help="Recommend an authentication method")
    target_group = rec_parser.add_mutually_exclusive_group(required=True)
    target_group.add_argument("--host", help="Git host domain (e.g., github.com)")
    target_group.add_argument("--url", help="Repository clone URL")
    _add_policy_args(rec_parser)
    rec_parser.add_argument(
        "--strict", action="store_true", help="Fail on policy conflicts"
    )
    _add_output_args(rec_parser)

    # rotation command
    rot_parser = subparsers.add_parser("rotation", help="Check a token's rotation status")
    rot_parser.add_argument("--secret-id", required=True, help="Secret store reference")
    rot_parser.add_argument("--expires-at", required=True, help="Token expiry (ISO-8601)")
    rot_parser.add_argument("--created-at", help="Token creation time (ISO-8601)")
    rot_parser.add_argument("--now", help="Evaluate at this time instead of now")
    rot_parser.add_argument("--grace-days", type=int, help="Rotation lead time in days")
    rot_parser.add_argument(
        "--output", "-o", choices=["console", "json"], default="console"
    )

    # init command
    init_parser = subparsers.add_parser("init", help="Create a workspace")
    init_parser.add_argument("name", help="Workspace name")
    init_target = init_parser.add_mutually_exclusive_group(required=True)
    init_target.add_argument("--host", help="Git host domain")
    init_target.add_argument("--url", help="Repository clone URL")
    init_target.add_argument(
        "--from-git", action="store_true", help="Use the current checkout's origin remote"
    )
    init_parser.add_argument("--branch", "-b", help="Branch to track (default: main)")
    init_parser.add_argument(
        "--path", "-p", type=Path, help="Parent directory (default: CRED_WORKSPACES_DIR)"
    )
    _add_policy_args(init_parser)

    # check command
    check_parser = subparsers.add_parser("check", help="Advise on a workspace")
    check_parser.add_argument(
        "--workspace", "-w", help="Workspace name or path (default: current workspace)"
    )
    check_parser.add_argument("--now", help="Evaluate at this time instead of now")
    check_parser.add_argument("--strict", action="store_true", help="Fail on policy conflicts")
    _add_output_args(check_parser)

    # rotate command
    rotate_parser = subparsers.add_parser("rotate", help="Record a rotated token")
    rotate_parser.add_argument("--secret-id", required=True, help="New secret reference")
    rotate_parser.add_argument("--expires-at", required=True, help="New expiry (ISO-8601)")
    rotate_parser.add_argument(
        "--workspace", "-w", help="Workspace name or path (default: current workspace)"
    )
    rotate_parser.add_argument(
        "--output", "-o", choices=["console", "json"], default="console"
    )

    # list command
    subparsers.add_parser("list", help="List workspaces")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level or get_settings().log_level)
    reporter = get_reporter(getattr(args, "output", "console"))

    try:
        if args.command == "recommend":
            recommend(
                host=args.host,
                url=args.url,
                secrets_forbidden=args.secrets_forbidden,
                automated=args.automated,
                strict=args.strict,
                output=args.output,
                verbose=args.verbose,
            )
        elif args.command == "rotation":
            check_rotation(
                secret_id=args.secret_id,
                expires_at=args.expires_at,
                created_at=args.created_at,
                now=args.now,
                grace_days=args.grace_days,
                output=args.output,
            )
        elif args.command == "init":
            init_workspace(
                args.name,
                host=args.host,
                url=args.url,
                from_git=args.from_git,
                branch=args.branch,
                secrets_forbidden=args.secrets_forbidden,
                automated=args.automated,
                path=args.path,
            )
        elif args.command == "check":
            check_workspace(
                workspace=args.workspace,
                now=args.now,
                strict=args.strict,
                output=args.output,
                verbose=args.verbose,
            )
        elif args.command == "rotate":
            rotate_workspace_secret(
                secret_id=args.secret_id,
                expires_at=args.expires_at,
                workspace=args.workspace,
                output=args.output,
            )
        elif args.command == "list":
            list_all()
        else:
            parser.print_help()
    except PolicyConflictError as e:
        reporter.report_error(str(e), conflict=True)
        sys.exit(EXIT_CONFLICT)
    except (AdvisorError, ValidationError, FileNotFoundError, FileExistsError) as e:
        reporter.report_error(str(e))
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
