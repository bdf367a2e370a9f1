"""SQLite-backed collaborators for the reminder engine and commands.

Each adapter wraps the store's query functions and turns sqlite3 errors
into the engine's error types, so callers never depend on sqlite3.
"""

import sqlite3
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any

from spendeasy.dates import next_occurrence
from spendeasy.domain.models import Category, Expense, Money
from spendeasy.domain.reminders import After, DailyAt, ReminderKind, Trigger, flag_key
from spendeasy.errors import FlagStoreError, QueryError, RepositoryError, ScheduleError
from spendeasy.store import queries

LAST_APP_OPEN_KEY = "lastAppOpenTime"
ALERT_KEY_PREFIX = "alert_"


def row_to_expense(row: dict[str, Any]) -> Expense:
    """Convert a stored expense row into an Expense."""
    return Expense(
        id=row["id"],
        title=row["title"],
        amount=Money(Decimal(row["amount"])),
        date=datetime.fromisoformat(row["date"]),
        category=Category.parse(row["category"]),
    )


class SqliteExpenseRepository:
    """Durable expense store."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    def query(self, since: datetime, until: datetime) -> list[Expense]:
        """Expenses dated within ``[since, until]``, newest first.

        Raises:
            QueryError: If the expenses could not be read.
        """
        try:
            rows = queries.get_expenses(since, until, db_path=self.db_path)
            return [row_to_expense(row) for row in rows]
        except (sqlite3.Error, ValueError) as e:
            raise QueryError(f"Could not query expenses from {since} to {until}: {e}") from e

    def all(self, limit: int | None = None) -> list[Expense]:
        """All expenses, newest first.

        Raises:
            QueryError: If the expenses could not be read.
        """
        try:
            return [row_to_expense(row) for row in queries.get_expenses(limit=limit, db_path=self.db_path)]
        except (sqlite3.Error, ValueError) as e:
            raise QueryError(f"Could not list expenses: {e}") from e

    def get(self, expense_id: str) -> Expense | None:
        """Look up one expense by id.

        Raises:
            QueryError: If the expense could not be read.
        """
        try:
            row = queries.get_expense(expense_id, self.db_path)
            return row_to_expense(row) if row else None
        except (sqlite3.Error, ValueError) as e:
            raise QueryError(f"Could not read expense {expense_id}: {e}") from e

    def save(self, expense: Expense) -> None:
        """Insert a new expense or update an existing one with the same id.

        Raises:
            RepositoryError: If the expense could not be saved.
        """
        fields = (expense.title, str(expense.amount), expense.date, expense.category.value)
        try:
            if not queries.update_expense(expense.id, *fields, db_path=self.db_path):
                queries.insert_expense(expense.id, *fields, db_path=self.db_path)
        except sqlite3.Error as e:
            raise RepositoryError(f"Could not save expense {expense.id}: {e}") from e

    def delete(self, expense_id: str) -> bool:
        """Delete an expense.

        Returns:
            True if the expense existed.

        Raises:
            RepositoryError: If the expense could not be deleted.
        """
        try:
            return queries.delete_expense(expense_id, self.db_path)
        except sqlite3.Error as e:
            raise RepositoryError(f"Could not delete expense {expense_id}: {e}") from e


class SqliteFlagStore:
    """Persisted reminder flags and the last app-open time."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path

    def has_shown(self, kind: ReminderKind, month_start: datetime) -> bool:
        try:
            return queries.get_value(flag_key(kind, month_start), self.db_path) == "1"
        except sqlite3.Error as e:
            raise FlagStoreError(f"Could not read flag for {kind.value}: {e}") from e

    def mark_shown(self, kind: ReminderKind, month_start: datetime) -> None:
        try:
            queries.set_value(flag_key(kind, month_start), "1", self.db_path)
        except sqlite3.Error as e:
            raise FlagStoreError(f"Could not write flag for {kind.value}: {e}") from e

    def last_app_open(self) -> datetime | None:
        try:
            value = queries.get_value(LAST_APP_OPEN_KEY, self.db_path)
        except sqlite3.Error as e:
            raise FlagStoreError(f"Could not read {LAST_APP_OPEN_KEY}: {e}") from e
        return datetime.fromisoformat(value) if value else None

    def set_last_app_open(self, when: datetime) -> None:
        try:
            queries.set_value(LAST_APP_OPEN_KEY, queries.format_timestamp(when), self.db_path)
        except sqlite3.Error as e:
            raise FlagStoreError(f"Could not write {LAST_APP_OPEN_KEY}: {e}") from e

    def prune_before(self, cutoff: datetime) -> int:
        """Delete flags for periods starting before ``cutoff``.

        Returns:
            Number of flags deleted.
        """
        cutoff_epoch = int(cutoff.timestamp())
        try:
            keys = queries.get_keys_with_prefix(ALERT_KEY_PREFIX, self.db_path)
            stale = []
            for key in keys:
                epoch = _period_epoch(key)
                if epoch is not None and epoch < cutoff_epoch:
                    stale.append(key)
            return queries.delete_keys(stale, self.db_path)
        except sqlite3.Error as e:
            raise FlagStoreError(f"Could not prune reminder flags: {e}") from e


def _period_epoch(key: str) -> int | None:
    """Period key (epoch seconds) of an alert flag key, or None if malformed."""
    _, _, epoch = key.rpartition("_")
    try:
        return int(epoch)
    except ValueError:
        return None


def fire_time(trigger: Trigger, now: datetime) -> datetime:
    """First time a trigger fires when scheduled at ``now``."""
    if isinstance(trigger, DailyAt):
        return next_occurrence(now, trigger.hour, trigger.minute)
    return now + timedelta(seconds=trigger.seconds)


class OutboxGateway:
    """Local notification queue.

    Scheduled notifications are stored in the database and handed out by
    spendeasy.notify when they fall due. Scheduling an identifier again
    replaces the pending notification.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        enabled: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db_path = db_path
        self.enabled = enabled
        self.clock = clock

    def request_permission(self) -> bool:
        return self.enabled

    def schedule(self, identifier: str, title: str, body: str, trigger: Trigger) -> None:
        """Queue a notification.

        Raises:
            ScheduleError: If the notification could not be stored.
        """
        try:
            if isinstance(trigger, DailyAt):
                queries.upsert_notification(
                    identifier,
                    title,
                    body,
                    "daily",
                    fire_time(trigger, self.clock()),
                    hour=trigger.hour,
                    minute=trigger.minute,
                    db_path=self.db_path,
                )
            elif isinstance(trigger, After):
                queries.upsert_notification(
                    identifier, title, body, "once", fire_time(trigger, self.clock()), db_path=self.db_path
                )
            else:
                raise ScheduleError(f"Unsupported trigger {trigger!r}")
        except sqlite3.Error as e:
            raise ScheduleError(f"Could not schedule '{identifier}': {e}") from e

    def cancel_pending(self, identifiers: Iterable[str]) -> None:
        """Remove notifications that have not been delivered yet.

        Raises:
            ScheduleError: If the queue could not be updated.
        """
        try:
            queries.delete_pending_notifications(sorted(set(identifiers)), self.db_path)
        except sqlite3.Error as e:
            raise ScheduleError(f"Could not cancel pending notifications: {e}") from e
