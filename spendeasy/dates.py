"""Date utilities for spendeasy.

Pure functions for month windows, period navigation and formatting.
All datetimes are naive and interpreted as local time.
"""

import calendar
from datetime import date, datetime, timedelta

from spendeasy.domain.aggregate import Granularity
from spendeasy.domain.models import Month


def month_start(when: datetime) -> datetime:
    """First instant (local midnight) of the month containing ``when``."""
    return datetime(when.year, when.month, 1)


def next_month_start(when: datetime) -> datetime:
    """First instant of the month after the one containing ``when``."""
    if when.month == 12:
        return datetime(when.year + 1, 1, 1)
    return datetime(when.year, when.month + 1, 1)


def days_in_month(when: datetime) -> int:
    """Number of days in the month containing ``when``."""
    return calendar.monthrange(when.year, when.month)[1]


def days_remaining(when: datetime) -> int:
    """Days left in the month after today (0 on the last day)."""
    return days_in_month(when) - when.day


def previous_month_window(when: datetime) -> tuple[datetime, date]:
    """Calculate the previous month's window.

    Args:
        when: Any instant in the current month.

    Returns:
        Tuple of (first instant of previous month, last calendar day of
        previous month). The last day is inclusive.
    """
    start = month_start(month_start(when) - timedelta(days=1))
    last_day = (next_month_start(start) - timedelta(days=1)).date()
    return start, last_day


def next_occurrence(now: datetime, hour: int, minute: int) -> datetime:
    """Next wall-clock time at hour:minute strictly after ``now``."""
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def parse_month(month: Month) -> datetime:
    """Parse a YYYY-MM month string.

    Raises:
        ValueError: If the month is not in YYYY-MM format.
    """
    return datetime.strptime(month, "%Y-%m")


def shift_period(reference: datetime, granularity: Granularity, steps: int) -> datetime:
    """Move a reference date by whole days or months.

    Month shifts clamp the day to the target month's length (31 Jan + 1 month
    is 28/29 Feb).
    """
    if granularity is Granularity.DAY:
        return reference + timedelta(days=steps)

    index = reference.year * 12 + (reference.month - 1) + steps
    year, month_index = divmod(index, 12)
    last_day = calendar.monthrange(year, month_index + 1)[1]
    return reference.replace(year=year, month=month_index + 1, day=min(reference.day, last_day))


def can_navigate_forward(reference: datetime, granularity: Granularity, now: datetime) -> bool:
    """Whether moving one period forward stays in the past."""
    return shift_period(reference, granularity, 1) <= now


def period_label(reference: datetime, granularity: Granularity) -> str:
    """Human-readable label for the period (e.g., "Jan 15, 2025" or "January 2025")."""
    if granularity is Granularity.DAY:
        return reference.strftime("%b %d, %Y")
    return reference.strftime("%B %Y")
