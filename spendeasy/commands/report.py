"""Report, inspect and chart commands for viewing spending."""

import sys
from datetime import datetime
from decimal import Decimal

from rich.table import Table

from spendeasy.adapters import SqliteExpenseRepository
from spendeasy.commands.common import (
    console,
    format_money,
    load_settings_or_exit,
    print_navigation,
    require_database,
    resolve_period,
)
from spendeasy.dates import period_label
from spendeasy.domain.aggregate import (
    Granularity,
    expenses_in_category,
    filter_by_period,
    grand_total,
    group_by_category,
    histogram_bar_length,
    percentage_of,
)
from spendeasy.domain.donut import (
    DEFAULT_CHART_SIZE,
    ChartGeometry,
    DonutSelection,
    Point,
    layout_slices,
    selection_label,
    selection_total,
    tap_angle,
)
from spendeasy.domain.models import Category, Expense
from spendeasy.errors import QueryError


def load_period_expenses(day: str | None, month: str | None) -> tuple[list[Expense], datetime, Granularity]:
    """Load the expenses of the requested period, exiting on errors."""
    db_path = require_database()
    try:
        reference, granularity = resolve_period(day, month, datetime.now())
        expenses = SqliteExpenseRepository(db_path).all()
    except (ValueError, QueryError) as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    return filter_by_period(expenses, reference, granularity), reference, granularity


def parse_point(raw: str) -> Point:
    """Parse an "X,Y" tap coordinate.

    Raises:
        ValueError: If the value is not two comma-separated numbers.
    """
    parts = raw.split(",")
    if len(parts) != 2:
        raise ValueError(f"Tap must be X,Y (got '{raw}')")
    return (float(parts[0]), float(parts[1]))


def report_command(
    day: str | None = None,
    month: str | None = None,
    histogram: bool = True,
) -> None:
    """Show spending by category for a day or month."""
    settings = load_settings_or_exit()
    expenses, reference, granularity = load_period_expenses(day, month)

    console.print(f"[bold cyan]{period_label(reference, granularity)}[/bold cyan]\n")

    if not expenses:
        console.print("[dim]No expenses yet[/dim]")
        print_navigation("report", reference, granularity, datetime.now())
        return

    totals = group_by_category(expenses)
    grand = grand_total(totals)
    max_amount = totals[0].total_amount
    bar_width = 30

    console.print("[bold]Spending by Category[/bold]\n")
    for item in totals:
        category = item.category
        amount_display = format_money(item.total_amount, settings.currency)
        percentage = percentage_of(item, grand)
        count = f"{item.transaction_count} transaction{'s' if item.transaction_count != 1 else ''}"
        line = f"  [#{category.color}]●[/] {category.value:14} {amount_display:>14} {percentage:>4}%"
        line += f"  [dim]{count:16}[/dim]"
        if histogram:
            line += " " + "█" * histogram_bar_length(item.total_amount, max_amount, bar_width)
        console.print(line)

    console.print(f"\n  [bold]Total:[/bold] {format_money(grand, settings.currency)}")
    print_navigation("report", reference, granularity, datetime.now())


def inspect_command(
    category: str,
    day: str | None = None,
    month: str | None = None,
) -> None:
    """Show the expenses of one category for a day or month."""
    settings = load_settings_or_exit()

    try:
        wanted = Category.parse(category)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    expenses, reference, granularity = load_period_expenses(day, month)
    matching = expenses_in_category(expenses, wanted)

    if not matching:
        console.print(f"[yellow]No {wanted.value} expenses for {period_label(reference, granularity)}[/yellow]")
        return

    total = sum((e.amount for e in matching), Decimal(0))
    table = Table(title=f"{wanted.icon} {wanted.value} - {period_label(reference, granularity)}")
    table.add_column("Date", style="cyan")
    table.add_column("Title", style="white")
    table.add_column("Amount", justify="right")
    table.add_column("ID", style="dim")

    for expense in matching:
        table.add_row(
            f"{expense.date:%Y-%m-%d %H:%M}",
            expense.title,
            format_money(expense.amount, settings.currency),
            expense.id,
        )

    console.print(table)
    console.print(f"\n[bold]Total:[/bold] {format_money(total, settings.currency)}")


def chart_command(
    day: str | None = None,
    month: str | None = None,
    taps: list[str] | None = None,
    size: float = DEFAULT_CHART_SIZE,
) -> None:
    """Show the donut chart layout and the selection after a series of taps."""
    settings = load_settings_or_exit()
    expenses, reference, granularity = load_period_expenses(day, month)

    if not expenses:
        console.print("[dim]No expenses yet[/dim]")
        return

    try:
        points = [parse_point(raw) for raw in taps or []]
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    geometry = ChartGeometry(size=size)
    totals = group_by_category(expenses)
    selection = DonutSelection(reference, granularity, geometry)

    for point in points:
        before = selection.selected
        after = selection.tap(point, totals)
        if tap_angle(point, geometry) is None:
            console.print(f"[dim]Tap {point[0]:g},{point[1]:g}: missed the ring[/dim]")
        elif before == after:
            console.print(f"[dim]Tap {point[0]:g},{point[1]:g}: no slice[/dim]")
        else:
            changed = next(iter(after ^ before))
            verb = "selected" if changed in after else "deselected"
            console.print(f"Tap {point[0]:g},{point[1]:g}: {verb} {changed.value}")

    table = Table(title=f"{period_label(reference, granularity)} ({len(expenses)} expenses)")
    table.add_column("Category")
    table.add_column("From", justify="right")
    table.add_column("To", justify="right")
    table.add_column("Amount", justify="right")
    table.add_column("Selected", justify="center")

    amounts = {item.category: item.total_amount for item in totals}
    for chart_slice in layout_slices(totals):
        category = chart_slice.category
        table.add_row(
            f"[#{category.color}]●[/] {category.value}",
            f"{chart_slice.start_angle:.1f}°",
            f"{chart_slice.end_angle:.1f}°",
            format_money(amounts[category], settings.currency),
            "✓" if category in selection.selected else "",
        )

    console.print(table)

    label = selection_label(selection.selected)
    total = selection_total(selection.selected, totals)
    console.print(f"\n[bold]{label}:[/bold] {format_money(total, settings.currency)}")
    if len(selection.selected) > 1:
        console.print("[dim]Combined[/dim]")
