from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from models.reply import ScanResult
from services.auth_service import AuthService
from services.auto_reply_service import AutoReplyService
from services.gmail_service import GmailService
from services.label_service import LabelService
from services.policies import policy_for
from services.reply_service import ReplyService
from services.scheduler import DEV_RANGE, PollingScheduler
from services.thread_scanner import ThreadScanner
from utils.config import POLICY_CHOICES, AppConfig, load_config
from utils.errors import AutoReplyError
from utils.logger import configure_logging


LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class AppContext:
    config: AppConfig
    gmail: GmailService
    labels: LabelService
    auto_reply: AutoReplyService
    console: Console


def build_context(env_file: str, log_level: str | None = None) -> AppContext:
    config = load_config(env_file)
    configure_logging(config.log_dir, log_level or config.log_level)
    console = Console()

    LOGGER.info("Authorizing the client...")
    creds = AuthService(config).authenticate()
    gmail = GmailService.from_credentials(creds, config.user_id)
    labels = LabelService(gmail, config.label_name)
    auto_reply = AutoReplyService(
        ThreadScanner(gmail),
        labels,
        ReplyService(gmail, config.reply_body),
    )
    return AppContext(config=config, gmail=gmail, labels=labels, auto_reply=auto_reply, console=console)


@click.group()
@click.option("--env-file", default=".env", show_default=True, help="Path to the .env file")
@click.option("--log-level", default=None, help="Override LOG_LEVEL from the environment")
@click.pass_context
def cli(ctx: click.Context, env_file: str, log_level: Optional[str]) -> None:
    """Auto-reply to today's unanswered Gmail threads."""

    try:
        ctx.obj = build_context(env_file, log_level)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--env-file") from exc
    except AutoReplyError as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command("run")
@click.argument("sender", required=False)
@click.option("--min-interval", type=click.IntRange(min=0), default=None, help="Shortest pause between scans (s)")
@click.option("--max-interval", type=click.IntRange(min=0), default=None, help="Longest pause between scans (s)")
@click.option("--dev", is_flag=True, default=False, help=f"Use the short {DEV_RANGE[0]}-{DEV_RANGE[1]}s range")
@click.option("--on-error", type=click.Choice(POLICY_CHOICES), default=None, help="What to do after a failed scan")
@click.pass_obj
def run_forever(
    app: AppContext,
    sender: str | None,
    min_interval: int | None,
    max_interval: int | None,
    dev: bool,
    on_error: str | None,
) -> None:
    """Scan now, then keep scanning after a random pause.

    SENDER limits replies to one address. Leave it out, or pass 'anyone' in
    any letter case, to answer every sender.
    """

    sender = sender or app.config.default_sender
    low, high = DEV_RANGE if dev else (app.config.min_interval, app.config.max_interval)
    low = low if min_interval is None else min_interval
    high = high if max_interval is None else max_interval
    if low > high:
        raise click.BadParameter(f"minimum {low} is greater than maximum {high}", param_hint="--min-interval")

    _log_identity(app)
    scheduler = PollingScheduler(
        lambda: app.auto_reply.run_scan(sender),
        min_interval=low,
        max_interval=high,
        policy=policy_for(on_error or app.config.on_error),
    )
    app.console.print(f"Polling every {low}-{high}s for {sender}. Press Ctrl+C to stop.")
    try:
        last = scheduler.run()
    except KeyboardInterrupt:
        scheduler.stop()
        app.console.print("Scheduler stopped.")
        return

    if last is not None and not last.ok:
        raise click.ClickException(f"Polling halted: {last.error}")


@cli.command("scan")
@click.argument("sender", required=False)
@click.pass_obj
def scan_once(app: AppContext, sender: str | None) -> None:
    """Run a single scan and print what happened to each thread.

    SENDER works as for run: omitted or 'anyone' in any case means every sender.
    """

    result = app.auto_reply.run_scan(sender or app.config.default_sender)
    if result.thread_ids:
        app.console.print(_build_scan_table(result))
    else:
        app.console.print("[bold green]No threads found today.[/bold green]")
    if not result.ok:
        raise click.ClickException(f"Scan failed: {result.error}")


@cli.command("ensure-label")
@click.pass_obj
def ensure_label(app: AppContext) -> None:
    """Create the marker label if it does not exist."""

    try:
        label = app.labels.ensure_label()
    except AutoReplyError as exc:
        raise click.ClickException(str(exc)) from exc
    app.console.print(f"Label {label.name} is ready (id: {label.id}).")


@cli.command("whoami")
@click.pass_obj
def whoami(app: AppContext) -> None:
    """Print the address of the authorized account."""

    app.console.print(_log_identity(app))


def _log_identity(app: AppContext) -> str:
    try:
        address = app.gmail.get_profile_email()
    except AutoReplyError as exc:
        raise click.ClickException(str(exc)) from exc
    LOGGER.info("Logged in as %s", address)
    return address


def _build_scan_table(result: ScanResult) -> Table:
    table = Table(title=f"Threads for {result.sender_filter}", show_lines=False)
    table.add_column("Thread", overflow="fold")
    table.add_column("Sender")
    table.add_column("Received")
    table.add_column("Outcome")

    for handled in result.handled:
        outcome = "[green]auto replied[/green]" if handled.replied else "already labelled"
        table.add_row(handled.thread_id, handled.sender_email, handled.received_time, outcome)
    for thread_id in result.not_replied:
        table.add_row(thread_id, "-", "-", "[yellow]has replies[/yellow]")
    for thread_id in result.skipped:
        table.add_row(thread_id, "-", "-", "[red]skipped[/red]")
    return table


def main() -> None:
    cli(standalone_mode=True)


if __name__ == "__main__":
    main()
