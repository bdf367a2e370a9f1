"""Pure functions for reminder decisions.

This module contains the functional core for spending reminders:
- No I/O operations (no database, no notifications, no clock)
- No side effects
- Decides which reminders to raise from totals, dates and flags
- Easy to test

The stateful side (queries, scheduling, flag bookkeeping) lives in
spendeasy.reminders.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

MILESTONE_LOW = Decimal(10000)
MILESTONE_HIGH = Decimal(15000)
END_OF_MONTH_DAYS = 7
INACTIVITY_HOURS = 24
DAILY_REMINDER_HOUR = 20
DAILY_REMINDER_MINUTE = 0
IMMEDIATE_DELAY_SECONDS = 1


class ReminderKind(str, Enum):
    """Reminder kinds, in the order a pass evaluates them."""

    MILESTONE_10K = "milestone_10k"
    MILESTONE_15K = "milestone_15k"
    END_OF_MONTH = "endOfMonth"
    MONTHLY_COMPARISON = "monthlyComparison"
    DAILY_REMINDER = "dailyReminder"
    INACTIVITY = "inactivity"

    @property
    def identifier(self) -> str:
        """Notification identifier; scheduling again replaces the pending one."""
        return _IDENTIFIERS[self]


_IDENTIFIERS = {
    ReminderKind.MILESTONE_10K: "milestone10k",
    ReminderKind.MILESTONE_15K: "milestone15k",
    ReminderKind.END_OF_MONTH: "endOfMonthAdvice",
    ReminderKind.MONTHLY_COMPARISON: "monthlyComparison",
    ReminderKind.DAILY_REMINDER: "dailyReminder",
    ReminderKind.INACTIVITY: "inactivityReminder",
}

# Kinds owned by the smart pass: cancelled and rescheduled together
MANAGED_KINDS = (
    ReminderKind.MILESTONE_10K,
    ReminderKind.MILESTONE_15K,
    ReminderKind.END_OF_MONTH,
    ReminderKind.MONTHLY_COMPARISON,
)


@dataclass(frozen=True)
class DailyAt:
    """Trigger repeating every day at a wall-clock time."""

    hour: int
    minute: int = 0


@dataclass(frozen=True)
class After:
    """Trigger firing once after a delay."""

    seconds: int


Trigger = DailyAt | After


@dataclass(frozen=True)
class ReminderIntent:
    """Immutable request to schedule one notification."""

    kind: ReminderKind
    title: str
    body: str
    trigger: Trigger

    @property
    def identifier(self) -> str:
        return self.kind.identifier


def flag_key(kind: ReminderKind, month_start: datetime) -> str:
    """Persisted flag key for a kind in the month starting at ``month_start``.

    The period key is the epoch seconds of the month's first local instant.
    """
    return f"alert_{kind.value}_{int(month_start.timestamp())}"


def format_currency(amount: Decimal, currency: str, decimals: int = 0) -> str:
    """Format an amount with thousands separators (e.g., "₹10,000")."""
    return f"{currency}{amount:,.{decimals}f}"


def milestone_kind(total: Decimal) -> ReminderKind | None:
    """Pick the milestone band for a month total.

    The 15k band supersedes the 10k band; at most one milestone applies.
    """
    if total >= MILESTONE_HIGH:
        return ReminderKind.MILESTONE_15K
    if total >= MILESTONE_LOW:
        return ReminderKind.MILESTONE_10K
    return None


def milestone_intent(kind: ReminderKind, day: int, currency: str) -> ReminderIntent:
    """Build the milestone alert for the given band.

    Raises:
        ValueError: If kind is not a milestone kind.
    """
    if kind is ReminderKind.MILESTONE_10K:
        spent = format_currency(MILESTONE_LOW, currency)
        advice = "Spend the rest of the money wisely."
    elif kind is ReminderKind.MILESTONE_15K:
        spent = format_currency(MILESTONE_HIGH, currency)
        advice = "Please control your spendings."
    else:
        raise ValueError(f"Not a milestone kind: {kind.value}")

    return ReminderIntent(
        kind=kind,
        title="Spending Alert",
        body=f"Today is day {day} & you have already spent {spent}. {advice}",
        trigger=After(IMMEDIATE_DELAY_SECONDS),
    )


def is_end_of_month(days_left: int) -> bool:
    """Whether the month is in its final week."""
    return days_left <= END_OF_MONTH_DAYS


def end_of_month_advice(total: Decimal) -> str:
    """Advice text for the end-of-month check, by spending band."""
    if total <= MILESTONE_LOW:
        return "You have money left! You can spend it on something useful or entertainment."
    if total <= MILESTONE_HIGH:
        return "Money spent this month was calculated. You are within limits."
    return "Control your spendings for the remaining days."


def end_of_month_intent(total: Decimal) -> ReminderIntent:
    return ReminderIntent(
        kind=ReminderKind.END_OF_MONTH,
        title="End of Month Check",
        body=end_of_month_advice(total),
        trigger=After(IMMEDIATE_DELAY_SECONDS),
    )


def comparison_intent(previous_total: Decimal, currency: str) -> ReminderIntent:
    """Build the new-month comparison against last month's total."""
    return ReminderIntent(
        kind=ReminderKind.MONTHLY_COMPARISON,
        title="New Month Started",
        body=f"Your last month total was {currency}{int(previous_total)}. Try to beat that this month!",
        trigger=After(IMMEDIATE_DELAY_SECONDS),
    )


def daily_intent(hour: int = DAILY_REMINDER_HOUR, minute: int = DAILY_REMINDER_MINUTE) -> ReminderIntent:
    return ReminderIntent(
        kind=ReminderKind.DAILY_REMINDER,
        title="Daily Expense Check",
        body="Don't forget to log your expenses for today!",
        trigger=DailyAt(hour, minute),
    )


def inactivity_intent() -> ReminderIntent:
    return ReminderIntent(
        kind=ReminderKind.INACTIVITY,
        title="Missing Your Expenses?",
        body="You haven't tracked your expenses today. Don't forget to log them!",
        trigger=After(IMMEDIATE_DELAY_SECONDS),
    )


def is_inactive(last_open: datetime, now: datetime) -> bool:
    """Whether at least a full day has passed since the app was last opened."""
    return now - last_open >= timedelta(hours=INACTIVITY_HOURS)


def plan_smart_reminders(
    day: int,
    days_left: int,
    month_total: Decimal,
    previous_total: Decimal | None,
    shown: Callable[[ReminderKind], bool],
    currency: str = "₹",
) -> list[ReminderIntent]:
    """Decide which milestone, end-of-month and comparison reminders to raise.

    Args:
        day: Day of the month (1-based).
        days_left: Days remaining in the month after today.
        month_total: Spending so far this month.
        previous_total: Last month's total, or None if it was not evaluated.
        shown: Predicate telling whether a kind was already shown this month.
        currency: Currency symbol for message bodies.

    Returns:
        Intents in evaluation order (milestone, end of month, comparison).
    """
    intents: list[ReminderIntent] = []

    kind = milestone_kind(month_total)
    if kind is not None and not shown(kind):
        intents.append(milestone_intent(kind, day, currency))

    if is_end_of_month(days_left) and not shown(ReminderKind.END_OF_MONTH):
        intents.append(end_of_month_intent(month_total))

    if previous_total is not None and previous_total > 0 and not shown(ReminderKind.MONTHLY_COMPARISON):
        intents.append(comparison_intent(previous_total, currency))

    return intents
