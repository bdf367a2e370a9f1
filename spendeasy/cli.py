"""CLI entry point for spendeasy."""

import typer

from spendeasy.commands.admin import backup_command, init_command
from spendeasy.commands.expenses import add_command, delete_command, edit_command, import_command, list_command
from spendeasy.commands.remind import deliver_command, pending_command, remind_command
from spendeasy.commands.report import chart_command, inspect_command, report_command
from spendeasy.domain.donut import DEFAULT_CHART_SIZE

app = typer.Typer(
    name="spendeasy",
    help="SpendEasy - Track your daily expenses and stay within your monthly limits",
    add_completion=False,
)


@app.callback()
def main() -> None:
    """SpendEasy - Track your daily expenses and stay within your monthly limits."""
    pass


@app.command(name="backup")
def backup(
    output_dir: str = typer.Option(
        None, "--output", "-o", help="Backup directory (default: $XDG_DATA_HOME/spendeasy/backups)"
    ),
) -> None:
    """Backup your database and configuration files."""
    backup_command(output_dir)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing database and config"),
    migrate: bool = typer.Option(False, "--migrate", help="Update the database schema only"),
) -> None:
    """Initialize spendeasy database and configuration."""
    init_command(force, migrate)


@app.command()
def add(
    title: str,
    amount: str,
    category: str = typer.Option("Food", "--category", "-c", help="Category (Food, Transport, Shopping, ...)"),
    date: str = typer.Option(None, "--date", "-d", help="Date and time of the expense (default: now)"),
) -> None:
    """Add an expense."""
    add_command(title, amount, category, date)


@app.command()
def edit(
    expense_id: str,
    title: str = typer.Option(None, "--title", help="New title"),
    amount: str = typer.Option(None, "--amount", help="New amount"),
    category: str = typer.Option(None, "--category", "-c", help="New category"),
    date: str = typer.Option(None, "--date", "-d", help="New date and time"),
) -> None:
    """Edit an existing expense."""
    edit_command(expense_id, title, amount, category, date)


@app.command()
def delete(expense_id: str) -> None:
    """Delete an expense."""
    delete_command(expense_id)


@app.command(name="list")
def list_expenses(
    day: str = typer.Option(None, "--day", help="Specific day (default: today)"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all your expenses"),
) -> None:
    """List your expenses."""
    list_command(day, month, all)


@app.command(name="report")
def report(
    day: str = typer.Option(None, "--day", help="Specific day (default: today)"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    histogram: bool = typer.Option(True, help="Show histogram of your spending"),
) -> None:
    """Show your spending breakdown by category."""
    report_command(day, month, histogram)


@app.command()
def inspect(
    category: str,
    day: str = typer.Option(None, "--day", help="Specific day (default: today)"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
) -> None:
    """Inspect your expenses for a specific category."""
    inspect_command(category, day, month)


@app.command()
def chart(
    day: str = typer.Option(None, "--day", help="Specific day (default: today)"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
    tap: list[str] = typer.Option(None, "--tap", "-t", help="Tap the chart at X,Y (repeatable)"),
    size: float = typer.Option(DEFAULT_CHART_SIZE, "--size", help="Chart size in points"),
) -> None:
    """Show the donut chart slices and the selection after tapping."""
    chart_command(day, month, tap, size)


@app.command()
def remind(
    now: str = typer.Option(None, "--now", help="Evaluate as of this time (default: now)"),
) -> None:
    """Check your spending and schedule reminders."""
    remind_command(now)


@app.command()
def deliver(
    now: str = typer.Option(None, "--now", help="Deliver as of this time (default: now)"),
) -> None:
    """Deliver notifications that are due."""
    deliver_command(now)


@app.command()
def pending() -> None:
    """List notifications waiting to be delivered."""
    pending_command()


@app.command(name="import")
def import_expenses(csv_file: str) -> None:
    """Import expenses from a CSV file."""
    import_command(csv_file)


if __name__ == "__main__":
    app()
