"""Formguard CLI: Typer app for dry-running the spam policy locally."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from formguard import __version__
from formguard.config import load_settings
from formguard.delivery import build_email
from formguard.exceptions import ConfigurationError
from formguard.keywords import REPLACE, get_default_keywords
from formguard.models import Submission
from formguard.policy import SubmissionPolicy
from formguard.rate_limit import RateLimitStore

console = Console()
app = typer.Typer(
    name="formguard",
    help="Formguard: spam-filtering contact form endpoint",
    no_args_is_help=True,
)


def _load_settings_or_exit():
    try:
        return load_settings()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(2)


# --- Version ---

def _version_callback(value: bool):
    if value:
        console.print(f"formguard {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", "-v", callback=_version_callback, is_eager=True),
):
    pass


# --- Commands ---

@app.command("check")
def check(
    name: str = typer.Option("", "--name", help="Sender name"),
    email: str = typer.Option("", "--email", help="Sender email"),
    message: str = typer.Option("", "--message", help="Message body"),
    website: str = typer.Option("", "--website", help="Honeypot field value"),
    time_ms: Optional[int] = typer.Option(None, "--time-ms", help="Milliseconds since form load"),
    client_id: str = typer.Option("cli", "--client-id", help="Client identifier"),
):
    """Run a submission through the spam policy without sending anything."""
    settings = _load_settings_or_exit()
    try:
        config = settings.heuristics_config()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(2)

    policy = SubmissionPolicy(
        store=RateLimitStore(
            limit=settings.rate_limit_max,
            window_seconds=settings.rate_limit_window_seconds,
        ),
        config=config,
        settings=settings,
    )
    submission = Submission(
        name=name,
        email=email,
        message=message,
        website=website,
        time_since_load=time_ms,
        client_id=client_id,
    )
    verdict = policy.evaluate(submission)

    if verdict.allowed:
        console.print(f"[green]Accepted[/green] (remaining quota: {verdict.remaining})")
        return
    console.print(f"[red]Rejected:[/red] {verdict.reason.value}")
    console.print(f"  {verdict.user_message}")
    console.print(f"  HTTP status: {verdict.status_code}")
    raise typer.Exit(1)


@app.command("keywords")
def keywords():
    """List the active spam keywords."""
    settings = _load_settings_or_exit()
    try:
        active = settings.heuristics_config().keywords
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(2)

    defaults = get_default_keywords()
    table = Table(title=f"Spam Keywords ({len(active)})")
    table.add_column("Keyword")
    table.add_column("Source")
    for term in sorted(active):
        table.add_row(term, "bundled" if term in defaults else "custom")
    console.print(table)

    if settings.keywords_file:
        verb = "replacing" if settings.keywords_mode == REPLACE else "extending"
        console.print(f"[dim]{verb} defaults with {settings.keywords_file}[/dim]")


@app.command("preview")
def preview(
    name: str = typer.Option(..., "--name", help="Sender name"),
    email: str = typer.Option(..., "--email", help="Sender email"),
    message: str = typer.Option(..., "--message", help="Message body"),
):
    """Show the email that would be sent for a submission."""
    settings = _load_settings_or_exit()
    content = build_email(
        Submission(name=name, email=email, message=message), settings,
    )
    console.print(f"[bold]From:[/bold] {content.from_display}")
    console.print(f"[bold]To:[/bold] {', '.join(content.to) or '(none configured)'}")
    if content.cc:
        console.print(f"[bold]Cc:[/bold] {', '.join(content.cc)}")
    console.print(f"[bold]Reply-To:[/bold] {content.reply_to}")
    console.print(Panel(Text(content.text), title=Text(content.subject)))
