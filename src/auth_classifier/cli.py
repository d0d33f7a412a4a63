import typer
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from auth_classifier.config.logger_config import setup_logging
from auth_classifier.parsers.factory import RecordParserFactory
from auth_classifier.services.classification_service import ClassificationService
from auth_classifier.domain.enums import EventType, TokenKind

app = typer.Typer(
    name="auth-classifier",
    help="Classify captured network traffic into authentication events and token types",
    add_completion=False,
)

console = Console()

EVENT_STYLES = {
    EventType.LOGIN: "green",
    EventType.LOGOUT: "yellow",
    EventType.TOKEN_REFRESH: "cyan",
    EventType.EXPIRY_CHECK: "red",
    EventType.ACCESS: "white",
    EventType.UNCLASSIFIED: "dim",
}

class State:
    verbose: bool = False
    service: Optional[ClassificationService] = None


state = State()


def _parse_choice(value: Optional[str], enum_class, option: str):
    """Case-insensitive enum lookup by value, for CLI filters"""
    if value is None:
        return None

    for member in enum_class:
        if member.value.lower() == value.lower():
            return member

    choices = ", ".join(member.value for member in enum_class)
    raise typer.BadParameter(f"'{value}' is not one of: {choices}", param_hint=option)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    )
):
    """
    Auth Classifier - Label captured requests as logins, refreshes, expiry checks and more.
    """

    if not RecordParserFactory.is_loaded():
        RecordParserFactory.load_parsers_from_config()

    if state.service is None:
        state.service = ClassificationService()

    state.verbose = verbose
    setup_logging(verbose)

@app.command(name="classify")
def classify_records(
    filepath: Path = typer.Argument(
        ...,
        help="Path to an exported capture file",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    record_format: Optional[str] = typer.Option(
        None,
        "--format", "-f",
        help="Export format (api-calls, har), guessed from the file extension when omitted"
    ),
    event: Optional[str] = typer.Option(
        None,
        "--event", "-e",
        help="Only show this event type (e.g. Login, TokenRefresh)",
    ),
    token: Optional[str] = typer.Option(
        None,
        "--token", "-t",
        help="Only show this token kind (e.g. AccessTokenJwt, SessionToken)",
    ),
    limit: int = typer.Option(
        50,
        "--limit", "-n",
        help="Maximum rows to display",
        min=1,
    ),
):
    """
    Classify every transaction in an export file.

    Examples:
        auth-classifier classify api_calls.json
        auth-classifier classify capture.har --event Login
        auth-classifier classify export.json --format har
    """
    event_type = _parse_choice(event, EventType, "--event")
    token_kind = _parse_choice(token, TokenKind, "--token")

    try:
        report = state.service.classify_file(
            filepath=filepath,
            record_format=record_format,
            event_type=event_type,
            token_kind=token_kind,
        )

        console.print(f"\n[bold]Parsed {report.total_parsed} transactions[/bold]")

        if not report.classifications:
            console.print(Panel(
                "[yellow]No transactions matched[/yellow]",
                title="Empty Result",
                border_style="yellow"
            ))
            return

        table = Table(title=f"Classified transactions (first {min(limit, report.total_shown)})")
        table.add_column("Time", style="dim", no_wrap=True)
        table.add_column("Method", style="cyan")
        table.add_column("Status", justify="right")
        table.add_column("URL", style="white", max_width=60)
        table.add_column("Event")
        table.add_column("Token", style="magenta")

        for result in report.classifications[:limit]:
            style = EVENT_STYLES[result.event_type]
            table.add_row(
                result.timestamp.strftime("%Y-%m-%d %H:%M:%S") if result.timestamp else "-",
                result.method.value if result.method else "-",
                str(result.status) if result.status is not None else "-",
                result.url,
                f"[{style}]{result.event_type.value}[/{style}]",
                result.token_type.label,
            )

        console.print(table)

        if report.total_shown > limit:
            console.print(f"\n[dim]Showing {limit} of {report.total_shown} transactions[/dim]")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if state.verbose:
            console.print_exception()
        raise typer.Exit(code=1)

@app.command(name="summary")
def summary(
    filepath: Path = typer.Argument(
        ...,
        help="Path to an exported capture file",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    record_format: Optional[str] = typer.Option(
        None,
        "--format", "-f",
        help="Export format (api-calls, har), guessed from the file extension when omitted"
    ),
):
    """
    Count transactions by event type and token type.

    Examples:
        auth-classifier summary api_calls.json
        auth-classifier summary capture.har
    """
    try:
        report = state.service.classify_file(filepath=filepath, record_format=record_format)
        result = state.service.summarize(report.classifications)

        if result.total == 0:
            console.print(Panel(
                "[yellow]No transactions found in this file[/yellow]",
                title="Empty Summary",
                border_style="yellow"
            ))
            return

        console.print(Panel(
            f"[bold]Transactions:[/bold] {result.total}\n"
            f"[bold]Presenting a credential:[/bold] {result.credential_bearing}",
            title=f"[bold]{filepath.name}[/bold]",
            border_style="cyan",
            padding=(1, 2)
        ))

        event_table = Table(title="Events", show_header=True, box=None, padding=(0, 2))
        event_table.add_column("Event", style="cyan", no_wrap=True)
        event_table.add_column("Count", justify="right")
        event_table.add_column("% of Total", justify="right", style="dim")

        for event_name, count in result.by_event_type.items():
            event_table.add_row(event_name, str(count), f"{count / result.total * 100:.1f}%")

        console.print(event_table)

        token_table = Table(title="Tokens", show_header=True, box=None, padding=(0, 2))
        token_table.add_column("Token", style="magenta", no_wrap=True)
        token_table.add_column("Count", justify="right")

        for token_label, count in result.top_token_types:
            token_table.add_row(token_label, str(count))

        console.print(token_table)

        if state.verbose and result.crosstab is not None:
            console.print("\n[bold]Event x Token[/bold]")
            console.print(result.crosstab.to_string())

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if state.verbose:
            console.print_exception()
        raise typer.Exit(code=1)


def cli_main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    cli_main()
