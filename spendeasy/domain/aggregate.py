"""Pure functions for expense aggregation.

This module contains the functional core for spending breakdowns:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are Decimals (Money type).
"""

from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from spendeasy.domain.models import Category, CategoryTotal, Expense, Money


class Granularity(str, Enum):
    """Calendar unit used to bucket expenses."""

    DAY = "day"
    MONTH = "month"


def in_period(when: datetime, reference_date: datetime, granularity: Granularity) -> bool:
    """Check whether a date falls in the same period as the reference date.

    Args:
        when: Date to test.
        reference_date: Any instant within the period.
        granularity: DAY compares calendar day, MONTH compares month and year.

    Returns:
        True if both dates share the period.
    """
    if granularity is Granularity.DAY:
        return when.date() == reference_date.date()
    return (when.year, when.month) == (reference_date.year, reference_date.month)


def filter_by_period(
    expenses: Iterable[Expense],
    reference_date: datetime,
    granularity: Granularity,
) -> list[Expense]:
    """Select expenses in the same day or month as the reference date.

    Args:
        expenses: Expenses to filter.
        reference_date: Any instant within the wanted period.
        granularity: Calendar unit to compare at.

    Returns:
        Matching expenses in their original order.
    """
    return [e for e in expenses if in_period(e.date, reference_date, granularity)]


def group_by_category(expenses: Iterable[Expense]) -> list[CategoryTotal]:
    """Group expenses into per-category totals.

    Args:
        expenses: Expenses to group.

    Returns:
        One CategoryTotal per category present, sorted by total descending.
        Equal totals keep the order in which their categories first appeared.
    """
    totals: dict[Category, Decimal] = {}
    counts: dict[Category, int] = {}

    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, Decimal(0)) + expense.amount
        counts[expense.category] = counts.get(expense.category, 0) + 1

    # dict preserves first-encountered order and sorted() is stable
    grouped = [CategoryTotal(cat, Money(amount), counts[cat]) for cat, amount in totals.items()]
    return sorted(grouped, key=lambda item: item.total_amount, reverse=True)


def grand_total(totals: Iterable[CategoryTotal]) -> Money:
    """Sum of all category totals (zero when empty)."""
    return Money(sum((item.total_amount for item in totals), Decimal(0)))


def percentage_of(category_total: CategoryTotal, grand: Decimal) -> int:
    """Calculate a category's share of the grand total.

    Args:
        category_total: Category aggregate.
        grand: Grand total across all categories.

    Returns:
        Whole percentage rounded half-up, or 0 when the grand total is zero.
    """
    if grand <= 0:
        return 0
    share = Decimal(100) * category_total.total_amount / grand
    return int(share.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def expenses_in_category(expenses: Iterable[Expense], category: Category) -> list[Expense]:
    """Expenses of one category, newest first."""
    matching = [e for e in expenses if e.category == category]
    return sorted(matching, key=lambda e: e.date, reverse=True)


def month_total(expenses: Sequence[Expense], since: datetime, until: datetime) -> Money:
    """Sum of amounts of expenses dated within ``[since, until]``."""
    return Money(sum((e.amount for e in expenses if since <= e.date <= until), Decimal(0)))


def histogram_bar_length(amount: Decimal, max_amount: Decimal, bar_width: int) -> int:
    """Calculate histogram bar length.

    Args:
        amount: Amount to display.
        max_amount: Maximum amount in dataset.
        bar_width: Maximum bar width in characters.

    Returns:
        Bar length in characters.
    """
    if max_amount <= 0:
        return 0
    return int((amount / max_amount) * bar_width)
