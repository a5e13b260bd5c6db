"""Rich console reporter for advisory responses."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from credential_advisor.advisory import AdvisoryResponse
from credential_advisor.policy import (
    AuthMethodKind,
    RotationObligation,
    RotationRecord,
    RotationStatus,
)

_STATUS_STYLE = {
    RotationStatus.PENDING: ("✅", "green"),
    RotationStatus.DUE: ("⚠️", "yellow"),
    RotationStatus.OVERDUE: ("❌", "red"),
}

_KIND_LABEL = {
    AuthMethodKind.OAUTH: "OAuth",
    AuthMethodKind.TOKEN_SECRET: "Token secret",
}


class ConsoleReporter:
    """Format and display advisory results in the console."""

    def __init__(self, console: Console | None = None, verbose: bool = False) -> None:
        self.console = console or Console()
        self.verbose = verbose

    def report(self, response: AdvisoryResponse, title: str | None = None) -> None:
        """Report one advisory response."""
        rec = response.recommendation
        lines = [
            f"[bold]Host:[/bold] [cyan]{response.target.host}[/cyan]",
            f"[bold]Recommended:[/bold] {_KIND_LABEL[rec.kind]}",
            f"[dim]→ {rec.rationale}[/dim]",
        ]
        if rec.required_scopes:
            lines.append(f"[bold]Required scopes:[/bold] {', '.join(sorted(rec.required_scopes))}")
        if self.verbose:
            lines.append(f"[dim]Rule: {rec.rule}[/dim]")

        border = "red" if rec.has_conflict else "green"
        self.console.print(
            Panel("\n".join(lines), title=title or "🔐 Credential advice", border_style=border)
        )

        if rec.conflict:
            self.console.print(
                f"[bold red]Policy conflict:[/bold red] {rec.conflict.description}"
            )
            self.console.print(f"   [dim]flags: {', '.join(rec.conflict.flags)}[/dim]")

        if response.rotation is not None:
            self.report_rotation(response.rotation)

        for warning in response.warnings:
            self.console.print(f"[yellow]⚠️  {warning}[/yellow]")

    def report_rotation(self, rotation: RotationObligation) -> None:
        """Report the rotation status of one stored token."""
        icon, color = _STATUS_STYLE[rotation.status]

        table = Table(show_header=True, header_style="bold", padding=(0, 1))
        table.add_column("Secret")
        table.add_column("Status")
        table.add_column("Due")
        table.add_column("Expires")
        table.add_row(
            rotation.secret_identifier,
            f"[{color}]{icon} {rotation.status.value}[/{color}]",
            rotation.due_at.isoformat(),
            rotation.expires_at.isoformat(),
        )
        self.console.print(table)
        self.console.print(f"   [dim]→ {rotation.recommended_action}[/dim]")

    def report_rotation_record(self, record: RotationRecord) -> None:
        """Report a completed rotation and its follow-ups."""
        self.console.print(
            f"[green]✓[/green] Rotated [cyan]{record.previous_secret_identifier}[/cyan] "
            f"→ [cyan]{record.new_secret_identifier}[/cyan]"
        )
        for action in record.follow_up_actions:
            self.console.print(f"   [dim]•[/dim] {action}")

    def report_error(self, message: str, conflict: bool = False) -> None:
        if conflict:
            self.console.print(f"[bold red]Policy conflict:[/bold red] {message}")
        else:
            self.console.print(f"[red]Error:[/red] {message}")
