"""Delivery of due notifications from the local outbox.

Notifications are queued by OutboxGateway; this module hands out the ones
whose fire time has passed, either to the console or to an HTTP webhook.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Protocol

import requests
from rich.console import Console
from rich.panel import Panel

from spendeasy.errors import DeliveryError
from spendeasy.logger import get_logger
from spendeasy.store import queries

logger = get_logger()

WEBHOOK_TIMEOUT_SECONDS = 10


@dataclass(frozen=True)
class Notification:
    """Immutable queued notification."""

    identifier: str
    title: str
    body: str
    trigger_type: str
    fire_at: datetime
    hour: int | None = None
    minute: int | None = None

    @property
    def repeats(self) -> bool:
        return self.trigger_type == "daily"

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Notification":
        return cls(
            identifier=row["identifier"],
            title=row["title"],
            body=row["body"],
            trigger_type=row["trigger_type"],
            fire_at=datetime.fromisoformat(row["fire_at"]),
            hour=row.get("hour"),
            minute=row.get("minute"),
        )


class Sender(Protocol):
    def send(self, notification: Notification) -> None: ...


class ConsoleSender:
    """Prints notifications as rich panels."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def send(self, notification: Notification) -> None:
        self.console.print(Panel(notification.body, title=f"🔔 {notification.title}", expand=False))


class WebhookSender:
    """Posts notifications as JSON to an HTTP endpoint."""

    def __init__(self, url: str, timeout: float = WEBHOOK_TIMEOUT_SECONDS):
        self.url = url
        self.timeout = timeout

    def send(self, notification: Notification) -> None:
        """POST the notification.

        Raises:
            DeliveryError: If the request fails or returns an error status.
        """
        payload = {
            "identifier": notification.identifier,
            "title": notification.title,
            "body": notification.body,
        }
        try:
            response = requests.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DeliveryError(f"Webhook delivery of '{notification.identifier}' failed: {e}") from e


def next_fire_after(notification: Notification, now: datetime) -> datetime:
    """Next daily fire time strictly after ``now`` for a repeating notification."""
    fire_at = notification.fire_at
    while fire_at <= now:
        fire_at += timedelta(days=1)
    return fire_at


def pending_notifications(db_path: Path | None = None) -> list[Notification]:
    """All undelivered notifications ordered by fire time.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    return [Notification.from_row(row) for row in queries.get_pending_notifications(db_path)]


def deliver_due(now: datetime, sender: Sender, db_path: Path | None = None) -> list[Notification]:
    """Deliver every pending notification whose fire time has passed.

    One-shot notifications are marked delivered; daily ones move to their
    next occurrence. A failed send leaves that notification pending and
    stops delivery.

    Args:
        now: Current local time.
        sender: Destination for notifications.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Notifications delivered, in fire order.

    Raises:
        DeliveryError: If a notification could not be sent.
        sqlite3.Error: If database operation fails.
    """
    delivered: list[Notification] = []

    for notification in [Notification.from_row(row) for row in queries.get_due_notifications(now, db_path)]:
        sender.send(notification)

        if notification.repeats:
            queries.reschedule_notification(notification.identifier, next_fire_after(notification, now), db_path)
        else:
            queries.mark_notification_delivered(notification.identifier, now, db_path)

        logger.info(f"Delivered {notification.identifier}")
        delivered.append(notification)

    return delivered


def make_sender(webhook_url: str, console: Console | None = None) -> Sender:
    """Pick the webhook sender when a URL is configured, else the console."""
    if webhook_url:
        return WebhookSender(webhook_url)
    return ConsoleSender(console)

