"""Helpers shared by command implementations."""

import sys
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pandas as pd
from rich.console import Console

from spendeasy.adapters import OutboxGateway, SqliteExpenseRepository, SqliteFlagStore
from spendeasy.config import Settings, get_log_dir, load_settings
from spendeasy.dates import can_navigate_forward, parse_month, shift_period
from spendeasy.domain.aggregate import Granularity
from spendeasy.domain.models import Month
from spendeasy.logger import setup_logging
from spendeasy.reminders import ReminderEngine
from spendeasy.store.schema import database_exists, get_db_path

console = Console()


def parse_when(raw: str) -> datetime:
    """Parse a user-supplied date or date-time.

    ISO values are read as-is; anything else goes through pandas.to_datetime
    so European and American formats are accepted, day-first when ambiguous.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    try:
        return datetime.fromisoformat(raw.strip()).replace(tzinfo=None)
    except ValueError:
        pass

    try:
        parsed = pd.to_datetime(raw, dayfirst=True)
    except (ValueError, pd.errors.ParserError) as e:
        raise ValueError(f"Could not parse date '{raw}': {e}") from e
    if pd.isna(parsed):
        raise ValueError(f"Could not parse date '{raw}'")
    return parsed.to_pydatetime().replace(tzinfo=None)


def resolve_period(day: str | None, month: str | None, now: datetime) -> tuple[datetime, Granularity]:
    """Compute the reference date and granularity for a view.

    Args:
        day: Optional specific day.
        month: Optional specific month (YYYY-MM format).
        now: Current time, used when neither is given (today).

    Returns:
        Tuple of (reference_date, granularity).

    Raises:
        ValueError: If both are given or either cannot be parsed.
    """
    if day and month:
        raise ValueError("Use either --day or --month, not both")
    if month:
        return parse_month(Month(month)), Granularity.MONTH
    if day:
        return parse_when(day), Granularity.DAY
    return now, Granularity.DAY


def period_option(reference: datetime, granularity: Granularity) -> str:
    """Command-line option selecting a period (e.g., "--month 2025-04")."""
    if granularity is Granularity.MONTH:
        return f"--month {reference:%Y-%m}"
    return f"--day {reference:%Y-%m-%d}"


def print_navigation(command: str, reference: datetime, granularity: Granularity, now: datetime) -> None:
    """Print the commands for the previous period and, unless it lies in the future, the next one."""
    previous = shift_period(reference, granularity, -1)
    hints = [f"← spendeasy {command} {period_option(previous, granularity)}"]
    if can_navigate_forward(reference, granularity, now):
        following = shift_period(reference, granularity, 1)
        hints.append(f"spendeasy {command} {period_option(following, granularity)} →")
    console.print(f"\n[dim]{'   '.join(hints)}[/dim]")


def format_money(amount: Decimal, currency: str) -> str:
    """Format an amount for display (e.g., "₹1,234.50")."""
    return f"{currency}{amount:,.2f}"


def load_settings_or_exit() -> Settings:
    """Load settings and configure logging, exiting on a bad config."""
    try:
        settings = load_settings()
    except (ValueError, OSError) as e:
        console.print(f"[red]Config error: {e}[/red]", style="bold")
        sys.exit(1)
    setup_logging(settings.log_level, get_log_dir())
    return settings


def require_database() -> Path:
    """Return the database path, exiting if it hasn't been initialized."""
    db_path = get_db_path()
    if not database_exists(db_path):
        console.print("[red]Database not found. Run 'spendeasy init' first.[/red]", style="bold")
        sys.exit(1)
    return db_path


def build_engine(
    db_path: Path,
    settings: Settings,
    clock: Callable[[], datetime] = datetime.now,
) -> ReminderEngine:
    """Wire the reminder engine to the SQLite collaborators.

    Args:
        db_path: Path to the database file.
        settings: Loaded settings.
        clock: Current local time, shared by the engine and the outbox.
    """
    return ReminderEngine(
        expenses=SqliteExpenseRepository(db_path),
        gateway=OutboxGateway(db_path, enabled=settings.notifications_enabled, clock=clock),
        flags=SqliteFlagStore(db_path),
        settings=settings,
        clock=clock,
    )
