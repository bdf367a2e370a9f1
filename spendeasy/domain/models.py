"""Domain type definitions for spendeasy.

These types provide semantic clarity and help with type checking:
- Money: Currency amount as a Decimal (never negative for expenses)
- Month: Month in YYYY-MM format
- Category: The fixed set of expense categories
- Expense: A single logged expense
- CategoryTotal: Per-category aggregate, derived per query
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import NewType

# Amounts are Decimals to avoid floating point errors
Money = NewType("Money", Decimal)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)


class Category(str, Enum):
    """Fixed set of expense categories."""

    FOOD = "Food"
    TRANSPORT = "Transport"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    OTHER = "Other"

    @classmethod
    def parse(cls, text: str) -> "Category":
        """Parse a category name, ignoring case.

        Args:
            text: Category name as typed by the user.

        Returns:
            Matching Category.

        Raises:
            ValueError: If the name is not a known category.
        """
        wanted = text.strip().lower()
        for category in cls:
            if category.value.lower() == wanted:
                return category
        names = ", ".join(c.value for c in cls)
        raise ValueError(f"Unknown category '{text}' (expected one of: {names})")

    @property
    def color(self) -> str:
        """Hex colour used for this category's slice."""
        return _COLORS.get(self, _COLORS[Category.OTHER])

    @property
    def icon(self) -> str:
        """Single-glyph icon for terminal display."""
        return _ICONS.get(self, _ICONS[Category.OTHER])


_COLORS = {
    Category.FOOD: "ff6b6b",
    Category.TRANSPORT: "4ecdc4",
    Category.SHOPPING: "ff6bcb",
    Category.BILLS: "ffa500",
    Category.ENTERTAINMENT: "a78bfa",
    Category.HEALTH: "51cf66",
    Category.OTHER: "94a3b8",
}

_ICONS = {
    Category.FOOD: "🍴",
    Category.TRANSPORT: "🚗",
    Category.SHOPPING: "🛍",
    Category.BILLS: "🧾",
    Category.ENTERTAINMENT: "📺",
    Category.HEALTH: "❤",
    Category.OTHER: "•",
}


def parse_money(value: Decimal | str | int) -> Money:
    """Parse a non-negative amount.

    Raises:
        ValueError: If the value is not a finite number or is negative.
    """
    try:
        amount = Decimal(str(value).strip())
    except ArithmeticError as e:
        raise ValueError(f"Invalid amount '{value}'") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid amount '{value}'")
    if amount < 0:
        raise ValueError(f"Amount must not be negative: {value}")
    return Money(amount)


def new_expense_id() -> str:
    """Generate a fresh expense identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Expense:
    """Immutable expense record."""

    title: str
    amount: Money
    date: datetime
    category: Category
    id: str = field(default_factory=new_expense_id)

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(f"Expense amount must not be negative: {self.amount}")

    @classmethod
    def create(cls, title: str, amount: Decimal | str | int, date: datetime, category: Category) -> "Expense":
        """Create a new expense with a freshly assigned id.

        Raises:
            ValueError: If the amount is negative or not a number.
        """
        return cls(title=title, amount=parse_money(amount), date=date, category=category)


@dataclass(frozen=True)
class CategoryTotal:
    """Immutable per-category aggregate."""

    category: Category
    total_amount: Money
    transaction_count: int
