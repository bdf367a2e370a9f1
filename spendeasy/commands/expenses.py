"""Expense management commands (add, edit, delete, list, import)."""

import dataclasses
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd
from rich.table import Table

from spendeasy.adapters import SqliteExpenseRepository
from spendeasy.commands.common import (
    build_engine,
    console,
    format_money,
    load_settings_or_exit,
    parse_when,
    print_navigation,
    require_database,
    resolve_period,
)
from spendeasy.config import Settings
from spendeasy.dates import period_label
from spendeasy.domain.aggregate import filter_by_period
from spendeasy.domain.imports import detect_columns, parse_expense_row
from spendeasy.domain.models import Category, Expense, Money, parse_money
from spendeasy.errors import RepositoryError


def _refresh_reminders(db_path: Path, settings: Settings) -> None:
    """Re-evaluate smart reminders after the expense data changed."""
    engine = build_engine(db_path, settings)
    outcome = engine.run_pass(smart_only=True)
    if not outcome.ok:
        console.print(f"[yellow]Reminders not updated: {outcome.error}[/yellow]")


def _parse_category(raw: str) -> Category:
    try:
        return Category.parse(raw)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _parse_amount(raw: str) -> Money:
    try:
        return parse_money(raw)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _parse_date(raw: str) -> datetime:
    try:
        return parse_when(raw)
    except ValueError as e:
        console.print(f"[red]Invalid date format: {e}[/red]")
        console.print("[dim]Accepted formats: YYYY-MM-DD, YYYY-MM-DD HH:MM, DD/MM/YYYY, etc.[/dim]")
        sys.exit(1)


def add_command(
    title: str,
    amount: str,
    category: str = "Food",
    date: str | None = None,
) -> None:
    """Add an expense.

    Args:
        title: Expense title.
        amount: Amount spent (non-negative).
        category: Category name.
        date: Optional date and time (defaults to now).
    """
    settings = load_settings_or_exit()
    db_path = require_database()

    if not title.strip():
        console.print("[red]Title must not be empty[/red]")
        sys.exit(1)

    expense = Expense.create(
        title.strip(),
        _parse_amount(amount),
        _parse_date(date) if date else datetime.now().replace(microsecond=0),
        _parse_category(category),
    )

    try:
        SqliteExpenseRepository(db_path).save(expense)
    except RepositoryError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    console.print("[green]✓[/green] Expense added:")
    console.print(f"  ID: {expense.id}")
    console.print(f"  Title: {expense.title}")
    console.print(f"  Amount: {format_money(expense.amount, settings.currency)}")
    console.print(f"  Category: {expense.category.icon} {expense.category.value}")
    console.print(f"  Date: {expense.date:%Y-%m-%d %H:%M}")

    _refresh_reminders(db_path, settings)


def edit_command(
    expense_id: str,
    title: str | None = None,
    amount: str | None = None,
    category: str | None = None,
    date: str | None = None,
) -> None:
    """Edit fields of an existing expense; its id never changes."""
    settings = load_settings_or_exit()
    db_path = require_database()
    repository = SqliteExpenseRepository(db_path)

    try:
        expense = repository.get(expense_id)
        if expense is None:
            console.print(f"[red]Expense '{expense_id}' not found[/red]")
            sys.exit(1)

        changes: dict[str, object] = {}
        if title is not None:
            if not title.strip():
                console.print("[red]Title must not be empty[/red]")
                sys.exit(1)
            changes["title"] = title.strip()
        if amount is not None:
            changes["amount"] = _parse_amount(amount)
        if category is not None:
            changes["category"] = _parse_category(category)
        if date is not None:
            changes["date"] = _parse_date(date)

        if not changes:
            console.print("[yellow]Nothing to change[/yellow]")
            return

        updated = dataclasses.replace(expense, **changes)
        repository.save(updated)
    except RepositoryError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    amount_display = format_money(updated.amount, settings.currency)
    console.print(f"[green]✓[/green] Expense updated: {updated.title} ({amount_display})")
    _refresh_reminders(db_path, settings)


def delete_command(expense_id: str) -> None:
    """Delete an expense."""
    load_settings_or_exit()
    db_path = require_database()

    try:
        deleted = SqliteExpenseRepository(db_path).delete(expense_id)
    except RepositoryError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    if not deleted:
        console.print(f"[red]Expense '{expense_id}' not found[/red]")
        sys.exit(1)
    console.print(f"[green]✓[/green] Expense {expense_id} deleted")


def list_command(day: str | None = None, month: str | None = None, all: bool = False) -> None:
    """List expenses for a day (default today) or month."""
    settings = load_settings_or_exit()
    db_path = require_database()

    now = datetime.now()
    try:
        reference, granularity = resolve_period(day, month, now)
        expenses = SqliteExpenseRepository(db_path).all()
    except (ValueError, RepositoryError) as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    if not all:
        expenses = filter_by_period(expenses, reference, granularity)

    if not expenses:
        console.print("[yellow]No expenses yet[/yellow]")
        if not all:
            print_navigation("list", reference, granularity, now)
        return

    period = "All Time" if all else period_label(reference, granularity)
    table = Table(title=f"Expenses - {period} ({len(expenses)})")
    table.add_column("Date", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Amount", justify="right")
    table.add_column("ID", style="dim")

    for expense in expenses:
        table.add_row(
            f"{expense.date:%Y-%m-%d %H:%M}",
            expense.title,
            f"{expense.category.icon} {expense.category.value}",
            format_money(expense.amount, settings.currency),
            expense.id,
        )

    console.print(table)
    if not all:
        print_navigation("list", reference, granularity, now)


def import_command(csv_file: str) -> None:
    """Import expenses from a CSV file."""
    settings = load_settings_or_exit()
    db_path = require_database()
    csv_path = Path(csv_file).expanduser()

    try:
        frame = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        console.print(f"[red]Could not read {csv_path}: {e}[/red]", style="bold")
        sys.exit(1)

    mapping = detect_columns(list(frame.columns))
    detected = {
        "title": mapping["title_column"],
        "amount": mapping["amount_column"],
        "date": mapping["date_column"],
    }
    missing = [label for label, column in detected.items() if not column]
    if missing:
        console.print(f"[red]Could not detect columns: {', '.join(missing)}[/red]")
        console.print(f"[dim]Headers found: {', '.join(frame.columns)}[/dim]")
        sys.exit(1)

    repository = SqliteExpenseRepository(db_path)
    imported = 0
    skipped = 0

    try:
        for row in frame.to_dict(orient="records"):
            parsed = parse_expense_row(row, mapping)
            if parsed is None:
                skipped += 1
                continue
            try:
                when = parse_when(parsed["date"])
            except ValueError:
                skipped += 1
                continue
            repository.save(Expense.create(parsed["title"], parsed["amount"], when, parsed["category"]))
            imported += 1
    except RepositoryError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Imported {imported} expenses")
    if skipped:
        console.print(f"[yellow]Skipped {skipped} unusable rows[/yellow]")

    if imported:
        _refresh_reminders(db_path, settings)
