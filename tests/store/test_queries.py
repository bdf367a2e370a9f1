"""Tests for spendeasy.store query functions against a real SQLite file."""

import sqlite3
from datetime import datetime
from pathlib import Path

import pytest

from spendeasy.store import (
    delete_expense,
    delete_keys,
    delete_pending_notifications,
    get_due_notifications,
    get_expense,
    get_expenses,
    get_keys_with_prefix,
    get_pending_notifications,
    get_value,
    init_database,
    insert_expense,
    mark_notification_delivered,
    reschedule_notification,
    set_value,
    update_expense,
    upsert_notification,
)


class TestInitDatabase:
    """Tests for init_database."""

    def test_is_repeatable(self, db_path: Path) -> None:
        """Should leave an existing database intact when run again."""
        insert_expense("a1", "Lunch", "120", datetime(2025, 4, 15, 13, 0), "Food", db_path)

        init_database(db_path)

        assert get_expense("a1", db_path) is not None


class TestExpenseQueries:
    """Tests for expense insert, update, delete and range queries."""

    def test_insert_and_get(self, db_path: Path) -> None:
        """Should round-trip the stored fields."""
        insert_expense("a1", "Lunch", "120.50", datetime(2025, 4, 15, 13, 0), "Food", db_path)

        row = get_expense("a1", db_path)

        assert row == {
            "id": "a1",
            "title": "Lunch",
            "amount": "120.50",
            "date": "2025-04-15T13:00:00",
            "category": "Food",
        }

    def test_duplicate_id_raises(self, db_path: Path) -> None:
        """Should refuse a second expense with the same id."""
        insert_expense("a1", "Lunch", "1", datetime(2025, 4, 15), "Food", db_path)

        with pytest.raises(sqlite3.IntegrityError):
            insert_expense("a1", "Dinner", "2", datetime(2025, 4, 15), "Food", db_path)

    def test_update_reports_missing(self, db_path: Path) -> None:
        """Should return False when no row has the id."""
        assert not update_expense("missing", "x", "1", datetime(2025, 4, 15), "Food", db_path)

    def test_update_changes_fields(self, db_path: Path) -> None:
        """Should overwrite every field but the id."""
        insert_expense("a1", "Lunch", "1", datetime(2025, 4, 15), "Food", db_path)

        assert update_expense("a1", "Taxi", "250", datetime(2025, 4, 16, 8, 0), "Transport", db_path)

        row = get_expense("a1", db_path)
        assert row is not None
        assert (row["title"], row["amount"], row["category"]) == ("Taxi", "250", "Transport")

    def test_delete(self, db_path: Path) -> None:
        """Should report whether a row was removed."""
        insert_expense("a1", "Lunch", "1", datetime(2025, 4, 15), "Food", db_path)

        assert delete_expense("a1", db_path)
        assert not delete_expense("a1", db_path)
        assert get_expense("a1", db_path) is None

    def test_range_is_inclusive_and_newest_first(self, db_path: Path) -> None:
        """Should include both bounds and order by date descending."""
        insert_expense("before", "x", "1", datetime(2025, 3, 31, 23, 59, 59), "Food", db_path)
        insert_expense("start", "x", "1", datetime(2025, 4, 1), "Food", db_path)
        insert_expense("middle", "x", "1", datetime(2025, 4, 10, 12, 0), "Food", db_path)
        insert_expense("end", "x", "1", datetime(2025, 4, 15, 18, 0), "Food", db_path)
        insert_expense("after", "x", "1", datetime(2025, 4, 15, 18, 0, 1), "Food", db_path)

        rows = get_expenses(datetime(2025, 4, 1), datetime(2025, 4, 15, 18, 0), db_path=db_path)

        assert [row["id"] for row in rows] == ["end", "middle", "start"]

    def test_limit(self, db_path: Path) -> None:
        """Should cap the number of rows."""
        for day in range(1, 6):
            insert_expense(f"e{day}", "x", "1", datetime(2025, 4, day), "Food", db_path)

        rows = get_expenses(limit=2, db_path=db_path)

        assert [row["id"] for row in rows] == ["e5", "e4"]


class TestKeyValueQueries:
    """Tests for the persisted key-value store."""

    def test_set_replaces(self, db_path: Path) -> None:
        """Should keep only the latest value."""
        assert get_value("lastAppOpenTime", db_path) is None

        set_value("lastAppOpenTime", "2025-04-14T09:00:00", db_path)
        set_value("lastAppOpenTime", "2025-04-15T09:00:00", db_path)

        assert get_value("lastAppOpenTime", db_path) == "2025-04-15T09:00:00"

    def test_prefix_listing_and_delete(self, db_path: Path) -> None:
        """Should list keys by prefix and delete them."""
        set_value("alert_endOfMonth_1", "1", db_path)
        set_value("alert_milestone_10k_2", "1", db_path)
        set_value("lastAppOpenTime", "2025-04-15T09:00:00", db_path)

        keys = get_keys_with_prefix("alert_", db_path)

        assert keys == ["alert_endOfMonth_1", "alert_milestone_10k_2"]
        assert delete_keys(keys, db_path) == 2
        assert get_keys_with_prefix("alert_", db_path) == []
        assert get_value("lastAppOpenTime", db_path) is not None

    def test_prefix_is_literal(self, db_path: Path) -> None:
        """Should not treat underscores as wildcards."""
        set_value("alertXmilestone", "1", db_path)

        assert get_keys_with_prefix("alert_", db_path) == []


class TestNotificationQueries:
    """Tests for the notification outbox."""

    def test_upsert_replaces_pending(self, db_path: Path) -> None:
        """Should keep one notification per identifier."""
        upsert_notification("milestone10k", "Spending Alert", "old", "once", datetime(2025, 4, 15, 9, 0), db_path=db_path)
        upsert_notification("milestone10k", "Spending Alert", "new", "once", datetime(2025, 4, 15, 10, 0), db_path=db_path)

        pending = get_pending_notifications(db_path)

        assert len(pending) == 1
        assert pending[0]["body"] == "new"
        assert pending[0]["fire_at"] == "2025-04-15T10:00:00"

    def test_due_and_delivered(self, db_path: Path) -> None:
        """Should return only undelivered notifications whose time has come."""
        upsert_notification("a", "A", "a", "once", datetime(2025, 4, 15, 9, 0), db_path=db_path)
        upsert_notification("b", "B", "b", "once", datetime(2025, 4, 15, 11, 0), db_path=db_path)

        due = get_due_notifications(datetime(2025, 4, 15, 10, 0), db_path)
        assert [row["identifier"] for row in due] == ["a"]

        mark_notification_delivered("a", datetime(2025, 4, 15, 10, 0), db_path)

        assert get_due_notifications(datetime(2025, 4, 15, 10, 0), db_path) == []
        assert [row["identifier"] for row in get_pending_notifications(db_path)] == ["b"]

    def test_cancel_only_touches_pending(self, db_path: Path) -> None:
        """Should leave delivered notifications in place."""
        upsert_notification("a", "A", "a", "once", datetime(2025, 4, 15, 9, 0), db_path=db_path)
        upsert_notification("b", "B", "b", "once", datetime(2025, 4, 15, 9, 0), db_path=db_path)
        mark_notification_delivered("a", datetime(2025, 4, 15, 9, 30), db_path)

        removed = delete_pending_notifications(["a", "b", "missing"], db_path)

        assert removed == 1
        assert get_pending_notifications(db_path) == []

    def test_reschedule(self, db_path: Path) -> None:
        """Should move a daily notification to its next fire time."""
        upsert_notification(
            "dailyReminder", "Daily", "log", "daily", datetime(2025, 4, 15, 20, 0), hour=20, minute=0, db_path=db_path
        )

        reschedule_notification("dailyReminder", datetime(2025, 4, 16, 20, 0), db_path)

        pending = get_pending_notifications(db_path)
        assert pending[0]["fire_at"] == "2025-04-16T20:00:00"
        assert (pending[0]["hour"], pending[0]["minute"]) == (20, 0)

    def test_trigger_type_is_checked(self, db_path: Path) -> None:
        """Should reject unknown trigger types."""
        with pytest.raises(sqlite3.IntegrityError):
            upsert_notification("x", "X", "x", "weekly", datetime(2025, 4, 15), db_path=db_path)
