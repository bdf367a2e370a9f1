"""Pure functions for importing expenses from CSV exports.

This module contains the functional core for CSV imports:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

Date parsing is left to the caller, which normalises dates with pandas.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, TypedDict

from spendeasy.domain.models import Category


class CsvMapping(TypedDict):
    """CSV column mapping configuration."""

    title_column: str
    amount_column: str
    date_column: str
    category_column: str


class ParsedExpense(TypedDict):
    """Parsed expense row ready for insertion."""

    title: str
    amount: Decimal
    date: str
    category: Category


def detect_columns(headers: list[str]) -> CsvMapping:
    """Detect title, amount, date and category columns from CSV headers.

    Args:
        headers: List of column headers.

    Returns:
        Mapping of detected columns. Undetected columns map to "".
    """
    title_col = ""
    amount_col = ""
    date_col = ""
    category_col = ""

    for header in headers:
        lower = header.lower()
        if not date_col and "date" in lower:
            date_col = header
        elif not amount_col and "amount" in lower and "currency" not in lower:
            amount_col = header
        elif not category_col and "category" in lower:
            category_col = header
        elif not title_col and any(word in lower for word in ("title", "description", "merchant", "name")):
            title_col = header

    return CsvMapping(
        title_column=title_col,
        amount_column=amount_col,
        date_column=date_col,
        category_column=category_col,
    )


def parse_amount(raw: Any) -> Decimal | None:
    """Parse an amount cell, tolerating currency symbols and separators.

    Returns:
        Signed amount, or None if the cell is not a number.
    """
    text = str(raw).strip()
    for symbol in ("₹", "£", "$", "€", ","):
        text = text.replace(symbol, "")
    if not text:
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def parse_category(raw: Any) -> Category:
    """Parse a category cell, falling back to Other for unknown names."""
    try:
        return Category.parse(str(raw))
    except ValueError:
        return Category.OTHER


def parse_expense_row(row: dict[str, Any], mapping: CsvMapping) -> ParsedExpense | None:
    """Parse a single CSV row into an expense.

    Args:
        row: CSV row as a dictionary.
        mapping: Column mapping.

    Returns:
        ParsedExpense, or None if the row has no title, no date, or an amount
        that is missing or negative.
    """
    title = str(row.get(mapping["title_column"], "") or "").strip()
    raw_date = str(row.get(mapping["date_column"], "") or "").strip()
    amount = parse_amount(row.get(mapping["amount_column"], ""))

    if not title or not raw_date or amount is None or amount < 0:
        return None

    category_col = mapping["category_column"]
    category = parse_category(row.get(category_col, "")) if category_col else Category.OTHER

    return ParsedExpense(title=title, amount=amount, date=raw_date, category=category)
