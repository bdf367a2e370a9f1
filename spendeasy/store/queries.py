"""Database query functions."""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from spendeasy.store.schema import get_db_path


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    """Create a database connection with row factory.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Database connection with row_factory configured.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def format_timestamp(when: datetime) -> str:
    """Format a datetime for storage (sortable ISO form, second precision)."""
    return when.isoformat(timespec="seconds")


def insert_expense(
    expense_id: str,
    title: str,
    amount: str,
    date: datetime,
    category: str,
    db_path: Path | None = None,
) -> None:
    """Insert an expense.

    Args:
        expense_id: Unique expense identifier.
        title: Display title.
        amount: Decimal amount as a string.
        date: Expense date and time.
        category: Category name.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails (including duplicate id).
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO expenses (id, title, amount, date, category) VALUES (?, ?, ?, ?, ?)",
                (expense_id, title, amount, format_timestamp(date), category),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def update_expense(
    expense_id: str,
    title: str,
    amount: str,
    date: datetime,
    category: str,
    db_path: Path | None = None,
) -> bool:
    """Update an existing expense's fields.

    Returns:
        True if a row was updated, False if no expense has that id.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "UPDATE expenses SET title = ?, amount = ?, date = ?, category = ? WHERE id = ?",
                (title, amount, format_timestamp(date), category, expense_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise


def delete_expense(expense_id: str, db_path: Path | None = None) -> bool:
    """Delete an expense.

    Returns:
        True if a row was deleted, False if no expense has that id.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise


def get_expense(expense_id: str, db_path: Path | None = None) -> dict[str, Any] | None:
    """Get a single expense by id, or None if it doesn't exist.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT id, title, amount, date, category FROM expenses WHERE id = ?", (expense_id,))
        row = cursor.fetchone()
        return dict(row) if row else None


def get_expenses(
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int | None = None,
    db_path: Path | None = None,
) -> list[dict[str, Any]]:
    """Get expenses, newest first.

    Args:
        since: Optional inclusive lower bound on the expense date.
        until: Optional inclusive upper bound on the expense date.
        limit: Maximum number of expenses to return. If None, returns all.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        List of expense dictionaries ordered by date descending.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        query = "SELECT id, title, amount, date, category FROM expenses WHERE 1 = 1"
        params: list[Any] = []

        if since is not None:
            query += " AND date >= ?"
            params.append(format_timestamp(since))
        if until is not None:
            query += " AND date <= ?"
            params.append(format_timestamp(until))

        query += " ORDER BY date DESC"

        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        cursor.execute(query, params)
        rows = cursor.fetchall()
        return [dict(row) for row in rows]


def get_value(key: str, db_path: Path | None = None) -> str | None:
    """Read a persisted value, or None if the key is unset.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row[0] if row else None


def set_value(key: str, value: str, db_path: Path | None = None) -> None:
    """Write a persisted value, replacing any existing one.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def get_keys_with_prefix(prefix: str, db_path: Path | None = None) -> list[str]:
    """List persisted keys starting with a prefix.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key", (len(prefix), prefix))
        return [row[0] for row in cursor.fetchall()]


def delete_keys(keys: list[str], db_path: Path | None = None) -> int:
    """Delete persisted keys.

    Returns:
        Number of keys deleted.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    if not keys:
        return 0
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.executemany("DELETE FROM kv WHERE key = ?", [(key,) for key in keys])
            conn.commit()
            return len(keys)
        except sqlite3.Error:
            conn.rollback()
            raise


def upsert_notification(
    identifier: str,
    title: str,
    body: str,
    trigger_type: str,
    fire_at: datetime,
    hour: int | None = None,
    minute: int | None = None,
    db_path: Path | None = None,
) -> None:
    """Schedule a notification, replacing any existing one with the same identifier.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                """
                INSERT INTO notifications (identifier, title, body, trigger_type, hour, minute, fire_at, delivered_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, NULL)
                ON CONFLICT(identifier) DO UPDATE SET
                    title = excluded.title,
                    body = excluded.body,
                    trigger_type = excluded.trigger_type,
                    hour = excluded.hour,
                    minute = excluded.minute,
                    fire_at = excluded.fire_at,
                    delivered_at = NULL
                """,
                (identifier, title, body, trigger_type, hour, minute, format_timestamp(fire_at)),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def delete_pending_notifications(identifiers: list[str], db_path: Path | None = None) -> int:
    """Cancel notifications that have not been delivered yet.

    Returns:
        Number of pending notifications removed.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    if not identifiers:
        return 0
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            placeholders = ", ".join("?" * len(identifiers))
            cursor.execute(
                f"DELETE FROM notifications WHERE delivered_at IS NULL AND identifier IN ({placeholders})",
                identifiers,
            )
            conn.commit()
            return cursor.rowcount
        except sqlite3.Error:
            conn.rollback()
            raise


def get_pending_notifications(db_path: Path | None = None) -> list[dict[str, Any]]:
    """Get all undelivered notifications ordered by fire time.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT identifier, title, body, trigger_type, hour, minute, fire_at FROM notifications "
            "WHERE delivered_at IS NULL ORDER BY fire_at"
        )
        return [dict(row) for row in cursor.fetchall()]


def get_due_notifications(now: datetime, db_path: Path | None = None) -> list[dict[str, Any]]:
    """Get undelivered notifications whose fire time has passed.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT identifier, title, body, trigger_type, hour, minute, fire_at FROM notifications "
            "WHERE delivered_at IS NULL AND fire_at <= ? ORDER BY fire_at",
            (format_timestamp(now),),
        )
        return [dict(row) for row in cursor.fetchall()]


def mark_notification_delivered(identifier: str, when: datetime, db_path: Path | None = None) -> None:
    """Mark a one-shot notification as delivered.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "UPDATE notifications SET delivered_at = ? WHERE identifier = ?",
                (format_timestamp(when), identifier),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise


def reschedule_notification(identifier: str, fire_at: datetime, db_path: Path | None = None) -> None:
    """Move a repeating notification to its next fire time.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "UPDATE notifications SET fire_at = ?, delivered_at = NULL WHERE identifier = ?",
                (format_timestamp(fire_at), identifier),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
