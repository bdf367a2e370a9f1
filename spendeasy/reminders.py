"""Reminder engine: turns spending history into scheduled notifications.

A pass runs on app foreground and after an expense is added or edited. It
reads this month's (and possibly last month's) expenses, decides which
reminders apply using spendeasy.domain.reminders, schedules them through the
notification gateway and records once-per-month flags.

Passes must be serialized by the caller: the read-decide-write sequence is
not atomic, so two concurrent passes could both schedule the same milestone.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, time
from decimal import Decimal
from typing import Protocol

from spendeasy.config import Settings
from spendeasy.dates import days_remaining, month_start, previous_month_window, shift_period
from spendeasy.domain.aggregate import Granularity, month_total
from spendeasy.domain.models import Expense
from spendeasy.domain.reminders import (
    MANAGED_KINDS,
    ReminderIntent,
    ReminderKind,
    Trigger,
    daily_intent,
    inactivity_intent,
    is_inactive,
    plan_smart_reminders,
)
from spendeasy.errors import FlagStoreError, QueryError, ScheduleError
from spendeasy.logger import get_logger

logger = get_logger()


class ExpenseSource(Protocol):
    def query(self, since: datetime, until: datetime) -> list[Expense]: ...


class NotificationGateway(Protocol):
    def request_permission(self) -> bool: ...

    def schedule(self, identifier: str, title: str, body: str, trigger: Trigger) -> None: ...

    def cancel_pending(self, identifiers: Iterable[str]) -> None: ...


class FlagStore(Protocol):
    def has_shown(self, kind: ReminderKind, month_start: datetime) -> bool: ...

    def mark_shown(self, kind: ReminderKind, month_start: datetime) -> None: ...

    def last_app_open(self) -> datetime | None: ...

    def set_last_app_open(self, when: datetime) -> None: ...

    def prune_before(self, cutoff: datetime) -> int: ...


@dataclass
class PassOutcome:
    """Result of one reminder pass."""

    scheduled: list[ReminderKind] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ReminderEngine:
    """Stateful scheduler for spending reminders.

    Args:
        expenses: Source of expenses by date range.
        gateway: Notification gateway used to schedule and cancel reminders.
        flags: Persisted once-per-month flags and last app-open time.
        settings: Currency, daily reminder time and flag retention.
        clock: Current local time; injectable for tests.
    """

    def __init__(
        self,
        expenses: ExpenseSource,
        gateway: NotificationGateway,
        flags: FlagStore,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.expenses = expenses
        self.gateway = gateway
        self.flags = flags
        self.settings = settings or Settings()
        self.clock = clock

    def run_pass(self, now: datetime | None = None, smart_only: bool = False) -> PassOutcome:
        """Run every reminder check once.

        Expense queries and planning happen before anything is scheduled, so
        a query failure aborts the pass with nothing scheduled or marked.
        Reminders are then scheduled in order: milestone, end of month,
        monthly comparison, daily reminder, inactivity. Flag retention runs
        last. Stops at the first collaborator failure.

        Args:
            now: Current local time. If None, uses the engine clock.
            smart_only: Skip the daily and inactivity reminders (used after an
                expense is added or edited).

        Returns:
            PassOutcome listing what was scheduled and the failure, if any.
        """
        if now is None:
            now = self.clock()

        outcome = PassOutcome()
        try:
            if not self.gateway.request_permission():
                raise ScheduleError("Notification permission not granted")

            intents = self.plan_smart_pass(now)
            self._apply_smart_reminders(now, intents, on_scheduled=outcome.scheduled.append)

            if not smart_only:
                outcome.scheduled.append(self.schedule_daily_reminder())
                if self.check_inactivity(now):
                    outcome.scheduled.append(ReminderKind.INACTIVITY)

            self.apply_retention(now)
        except (QueryError, ScheduleError, FlagStoreError) as e:
            logger.error(f"Reminder pass aborted: {e}")
            outcome.error = str(e)

        return outcome

    def schedule_daily_reminder(self) -> ReminderKind:
        """(Re)schedule the repeating evening reminder."""
        intent = daily_intent(self.settings.daily_hour, self.settings.daily_minute)
        self._schedule(intent)
        return intent.kind

    def check_inactivity(self, now: datetime) -> bool:
        """Schedule the inactivity reminder if the app was last opened a day or more ago.

        The first check ever only records ``now`` as the last app-open time.

        Returns:
            True if the inactivity reminder was scheduled.
        """
        last_open = self.flags.last_app_open()
        if last_open is None:
            self.flags.set_last_app_open(now)
            return False

        if not is_inactive(last_open, now):
            logger.debug(f"Last opened {last_open:%Y-%m-%d %H:%M}, not inactive")
            return False

        self._schedule(inactivity_intent())
        return True

    def record_app_open(self, now: datetime | None = None) -> None:
        self.flags.set_last_app_open(now or self.clock())

    def schedule_smart_reminders(
        self,
        now: datetime,
        on_scheduled: Callable[[ReminderKind], None] | None = None,
    ) -> list[ReminderKind]:
        """Evaluate and schedule milestone, end-of-month and monthly comparison reminders.

        Args:
            now: Current local time.
            on_scheduled: Optional callback invoked after each successful schedule.

        Returns:
            Kinds scheduled in this call, in evaluation order.

        Raises:
            QueryError: If expenses could not be read.
            ScheduleError: If cancelling or scheduling failed.
            FlagStoreError: If flags could not be read or written.
        """
        return self._apply_smart_reminders(now, self.plan_smart_pass(now), on_scheduled)

    def plan_smart_pass(self, now: datetime) -> list[ReminderIntent]:
        """Read this month's (and if needed last month's) totals and decide what to raise.

        Nothing is scheduled or marked here.

        Raises:
            QueryError: If expenses could not be read.
            FlagStoreError: If flags could not be read.
        """
        start = month_start(now)
        current_total = month_total(self.expenses.query(start, now), start, now)

        previous_total: Decimal | None = None
        if not self.flags.has_shown(ReminderKind.MONTHLY_COMPARISON, start):
            previous_start, previous_last_day = previous_month_window(now)
            previous_end = datetime.combine(previous_last_day, time.max)
            previous = self.expenses.query(previous_start, previous_end)
            previous_total = month_total(previous, previous_start, previous_end)

        logger.debug(
            f"Month total {current_total} on day {now.day}, "
            f"{days_remaining(now)} days left, previous total {previous_total}"
        )

        return plan_smart_reminders(
            day=now.day,
            days_left=days_remaining(now),
            month_total=current_total,
            previous_total=previous_total,
            shown=lambda kind: self.flags.has_shown(kind, start),
            currency=self.settings.currency,
        )

    def _apply_smart_reminders(
        self,
        now: datetime,
        intents: list[ReminderIntent],
        on_scheduled: Callable[[ReminderKind], None] | None = None,
    ) -> list[ReminderKind]:
        if not intents:
            return []

        # This pass owns the managed kinds; drop stale pending ones first
        self.gateway.cancel_pending(kind.identifier for kind in MANAGED_KINDS)

        start = month_start(now)
        scheduled: list[ReminderKind] = []
        for intent in intents:
            self._schedule(intent)
            self.flags.mark_shown(intent.kind, start)
            scheduled.append(intent.kind)
            if on_scheduled is not None:
                on_scheduled(intent.kind)
        return scheduled

    def apply_retention(self, now: datetime) -> int:
        """Drop reminder flags older than the configured retention window.

        Returns:
            Number of flags deleted (0 when retention is disabled).
        """
        months = self.settings.flag_retention_months
        if months <= 0:
            return 0
        cutoff = month_start(shift_period(month_start(now), Granularity.MONTH, -months))
        pruned = self.flags.prune_before(cutoff)
        if pruned:
            logger.info(f"Pruned {pruned} reminder flags older than {cutoff:%Y-%m}")
        return pruned

    def _schedule(self, intent: ReminderIntent) -> None:
        self.gateway.schedule(intent.identifier, intent.title, intent.body, intent.trigger)
        logger.info(f"Scheduled {intent.kind.value}: {intent.body}")
