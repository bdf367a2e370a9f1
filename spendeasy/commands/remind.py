"""Reminder commands: run a reminder pass and deliver due notifications."""

import sqlite3
import sys
from datetime import datetime

from rich.table import Table

from spendeasy.commands.common import (
    build_engine,
    console,
    load_settings_or_exit,
    parse_when,
    require_database,
)
from spendeasy.errors import DeliveryError, FlagStoreError
from spendeasy.notify import deliver_due, make_sender, pending_notifications


def _resolve_now(now: str | None) -> datetime:
    if not now:
        return datetime.now()
    try:
        return parse_when(now)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def remind_command(now: str | None = None) -> None:
    """Run a reminder pass as on app foreground, then record the app open."""
    settings = load_settings_or_exit()
    db_path = require_database()
    when = _resolve_now(now)

    engine = build_engine(db_path, settings, clock=lambda: when)
    outcome = engine.run_pass()

    if outcome.scheduled:
        console.print("[green]✓[/green] Scheduled:")
        for kind in outcome.scheduled:
            console.print(f"  • {kind.value}")
    else:
        console.print("[dim]Nothing new to schedule[/dim]")

    if not outcome.ok:
        console.print(f"[red]Reminder pass failed: {outcome.error}[/red]", style="bold")
        sys.exit(1)

    try:
        engine.record_app_open()
    except FlagStoreError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)


def deliver_command(now: str | None = None) -> None:
    """Deliver notifications that are due."""
    settings = load_settings_or_exit()
    db_path = require_database()
    when = _resolve_now(now)

    try:
        delivered = deliver_due(when, make_sender(settings.webhook_url, console), db_path)
    except DeliveryError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if not delivered:
        console.print("[dim]No notifications due[/dim]")
        return
    console.print(f"[green]✓[/green] Delivered {len(delivered)} notification{'s' if len(delivered) != 1 else ''}")


def pending_command() -> None:
    """List notifications waiting to be delivered."""
    load_settings_or_exit()
    db_path = require_database()

    try:
        pending = pending_notifications(db_path)
    except sqlite3.Error as e:
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)

    if not pending:
        console.print("[dim]No pending notifications[/dim]")
        return

    table = Table(title=f"Pending notifications ({len(pending)})")
    table.add_column("Fires at", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="white")
    table.add_column("Body")
    table.add_column("Repeats", justify="center")

    for notification in pending:
        table.add_row(
            f"{notification.fire_at:%Y-%m-%d %H:%M:%S}",
            notification.identifier,
            notification.title,
            notification.body,
            "daily" if notification.repeats else "",
        )

    console.print(table)
