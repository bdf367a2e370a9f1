"""Tests for spendeasy.domain.imports pure functions."""

from decimal import Decimal

from spendeasy.domain.imports import CsvMapping, detect_columns, parse_amount, parse_category, parse_expense_row
from spendeasy.domain.models import Category

MAPPING = CsvMapping(title_column="Title", amount_column="Amount", date_column="Date", category_column="Category")


class TestDetectColumns:
    """Tests for detect_columns."""

    def test_standard_headers(self) -> None:
        """Should detect all four columns."""
        mapping = detect_columns(["Date", "Title", "Amount", "Category"])

        assert mapping == MAPPING

    def test_bank_export_headers(self) -> None:
        """Should accept description/merchant style headers and skip currency columns."""
        mapping = detect_columns(["Transaction Date", "Merchant Name", "Amount Currency", "Amount (INR)"])

        assert mapping["date_column"] == "Transaction Date"
        assert mapping["title_column"] == "Merchant Name"
        assert mapping["amount_column"] == "Amount (INR)"
        assert mapping["category_column"] == ""


class TestParseAmount:
    """Tests for parse_amount."""

    def test_symbols_and_separators(self) -> None:
        """Should strip currency symbols and thousands separators."""
        assert parse_amount("₹1,250.50") == Decimal("1250.50")

    def test_keeps_sign(self) -> None:
        """Should leave negative amounts negative."""
        assert parse_amount("-45.00") == Decimal("-45.00")

    def test_garbage(self) -> None:
        """Should return None for non-numbers."""
        assert parse_amount("") is None
        assert parse_amount("n/a") is None


class TestParseCategory:
    """Tests for parse_category."""

    def test_known_and_unknown(self) -> None:
        """Should fall back to Other for unknown names."""
        assert parse_category("transport") is Category.TRANSPORT
        assert parse_category("Groceries") is Category.OTHER


class TestParseExpenseRow:
    """Tests for parse_expense_row."""

    def test_valid_row(self) -> None:
        """Should parse a complete row."""
        row = {"Date": "15/04/2025", "Title": " Lunch ", "Amount": "120", "Category": "Food"}

        parsed = parse_expense_row(row, MAPPING)

        assert parsed == {"title": "Lunch", "amount": Decimal(120), "date": "15/04/2025", "category": Category.FOOD}

    def test_missing_title_or_amount(self) -> None:
        """Should skip rows without a title or a usable amount."""
        assert parse_expense_row({"Date": "15/04/2025", "Title": "", "Amount": "1"}, MAPPING) is None
        assert parse_expense_row({"Date": "15/04/2025", "Title": "Lunch", "Amount": "x"}, MAPPING) is None

    def test_negative_amount_is_skipped(self) -> None:
        """Should skip refunds instead of importing them as spending."""
        row = {"Date": "2025-04-01", "Title": "Refund", "Amount": "-500", "Category": "Food"}

        assert parse_expense_row(row, MAPPING) is None

    def test_zero_amount_is_kept(self) -> None:
        """Should accept a zero amount."""
        parsed = parse_expense_row({"Date": "2025-04-01", "Title": "Free sample", "Amount": "0"}, MAPPING)

        assert parsed is not None
        assert parsed["amount"] == Decimal(0)

    def test_no_category_column(self) -> None:
        """Should default to Other when the file has no category column."""
        mapping = CsvMapping(title_column="Title", amount_column="Amount", date_column="Date", category_column="")

        parsed = parse_expense_row({"Date": "2025-04-15", "Title": "Gift", "Amount": "500"}, mapping)

        assert parsed is not None
        assert parsed["category"] is Category.OTHER
