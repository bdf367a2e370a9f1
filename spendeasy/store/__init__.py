"""Database store layer - provides persistence for the application.

This module re-exports all public database functions for easy importing.
"""

# Re-export schema functions
# Re-export all query functions
from spendeasy.store.queries import (
    delete_expense,
    delete_keys,
    delete_pending_notifications,
    get_due_notifications,
    get_expense,
    get_expenses,
    get_keys_with_prefix,
    get_pending_notifications,
    get_value,
    insert_expense,
    mark_notification_delivered,
    reschedule_notification,
    set_value,
    update_expense,
    upsert_notification,
)
from spendeasy.store.schema import database_exists, get_db_path, init_database

__all__ = [
    # Schema
    "database_exists",
    "get_db_path",
    "init_database",
    # Queries
    "delete_expense",
    "delete_keys",
    "delete_pending_notifications",
    "get_due_notifications",
    "get_expense",
    "get_expenses",
    "get_keys_with_prefix",
    "get_pending_notifications",
    "get_value",
    "insert_expense",
    "mark_notification_delivered",
    "reschedule_notification",
    "set_value",
    "update_expense",
    "upsert_notification",
]
