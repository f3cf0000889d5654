"""CLI entry point for branchgoals."""

import typer

from branchgoals.commands.access import access_command
from branchgoals.commands.admin import (
    delete_command,
    entries_command,
    goals_command,
    init_command,
    purge_command,
    restore_command,
)
from branchgoals.commands.dashboard import dashboard_command
from branchgoals.commands.entry import add_command
from branchgoals.commands.report import report_command
from branchgoals.log import setup_logging

app = typer.Typer(
    name="branchgoals",
    help="Regional fundraising tracker - branch entries, goals, badges and reports",
    add_completion=False,
)

PIN_HELP = "Access PIN (prompted if omitted)"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Regional fundraising tracker - branch entries, goals, badges and reports."""
    setup_logging(verbose)


@app.command(name="init")
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Reset the config to the demo region (keeps existing branches and entries)"
    ),
) -> None:
    """Initialize the database and configuration with the demo region."""
    init_command(force)


@app.command()
def add(
    total: int = typer.Argument(..., help="Entry total (max 500)"),
    branch: list[str] = typer.Option(
        None, "--branch", "-b", help="Branch as 'id' or 'id:amount' (repeat up to 3 times)"
    ),
    note: str = typer.Option(None, "--note", "-n", help="Optional note"),
    when: str = typer.Option(None, "--when", help="Date/time (YYYY-MM-DDTHH:MM, default: now)"),
) -> None:
    """Record an entry split across up to 3 branches."""
    add_command(total, branch, note, when)


@app.command()
def dashboard(
    watch: bool = typer.Option(False, "--watch", "-w", help="Keep refreshing until Ctrl+C"),
    interval: float = typer.Option(None, "--interval", help="Seconds between refreshes (default from config)"),
) -> None:
    """Show regional progress, branch totals and badges."""
    dashboard_command(watch, interval)


@app.command(name="report")
def report(
    granularity: str = typer.Option("week", "--granularity", "-g", help="day, week, month or total"),
    all: bool = typer.Option(False, "--all", "-a", help="Report all time"),
    date_from: str = typer.Option(None, "--from", help="First day (YYYY-MM-DD, default: this Monday)"),
    date_to: str = typer.Option(None, "--to", help="Last day (YYYY-MM-DD, default: this Sunday)"),
    csv_path: str = typer.Option(None, "--csv", help="Export rows to a CSV file instead of printing"),
    watch: bool = typer.Option(False, "--watch", "-w", help="Keep refreshing until Ctrl+C"),
    interval: float = typer.Option(None, "--interval", help="Seconds between refreshes (default from config)"),
) -> None:
    """Show amounts per period and branch against goals."""
    report_command(granularity, all, date_from, date_to, csv_path, watch, interval)


@app.command()
def access(
    pin: str = typer.Option(None, "--pin", help=PIN_HELP),
) -> None:
    """Show the summary and entries your PIN gives access to."""
    access_command(pin)


@app.command()
def goals(
    assignments: list[str] = typer.Option(None, "--set", help="Set a goal as branch=goal (repeatable)"),
    pin: str = typer.Option(None, "--pin", help=PIN_HELP),
) -> None:
    """Show or set branch goals (admin)."""
    goals_command(pin, assignments)


@app.command()
def entries(
    deleted: bool = typer.Option(False, "--deleted", help="Only show deleted entries"),
    pin: str = typer.Option(None, "--pin", help=PIN_HELP),
) -> None:
    """List all entries (admin)."""
    entries_command(pin, deleted)


@app.command()
def delete(
    entry_id: str,
    pin: str = typer.Option(None, "--pin", help=PIN_HELP),
) -> None:
    """Move an entry to Deleted (admin)."""
    delete_command(entry_id, pin)


@app.command()
def restore(
    entry_id: str,
    pin: str = typer.Option(None, "--pin", help=PIN_HELP),
) -> None:
    """Restore a deleted entry (admin)."""
    restore_command(entry_id, pin)


@app.command()
def purge(
    entry_id: str,
    pin: str = typer.Option(None, "--pin", help=PIN_HELP),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Permanently delete an entry and its allocations (admin)."""
    purge_command(entry_id, pin, yes)


if __name__ == "__main__":
    app()
