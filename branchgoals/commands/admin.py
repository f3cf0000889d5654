"""Admin commands for setup, goals and entry management."""

import logging
import sqlite3
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from branchgoals.commands.access import (
    db_path_or_exit,
    fail_persistence,
    format_allocations,
    load_settings_or_exit,
    require_admin,
    zone_or_exit,
)
from branchgoals.config import create_default_config, get_config_path, load_settings
from branchgoals.dates import format_medium_datetime
from branchgoals.domain.models import Amount, Branch, BranchId
from branchgoals.domain.report import regional_goal
from branchgoals.store.queries import (
    get_entry,
    get_regional_goal,
    hard_delete_entry,
    list_branches,
    list_entries,
    restore_entry,
    seed_branches,
    soft_delete_entry,
    update_branch_goal,
)
from branchgoals.store.schema import get_db_path, init_database

console = Console()
logger = logging.getLogger(__name__)


def run_full_init(db_path: Path, config_path: Path) -> None:
    """Initialize new database and config, then seed branches."""
    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print(f"[cyan]Initializing database at {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Database initialized")

    settings = load_settings(config_path)
    inserted = seed_branches(settings.get("branches", []), db_path)
    console.print(f"[green]✓[/green] Seeded {inserted} branches")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Database: {db_path}[/dim]")
    console.print(f"[dim]Config: {config_path}[/dim]")
    console.print("[yellow]Change the demo PINs in the config file before sharing them.[/yellow]")


def init_command(force: bool = False) -> None:
    """Initialize branchgoals database and configuration."""
    db_path = get_db_path()
    config_path = get_config_path()

    db_exists = db_path.exists()
    config_exists = config_path.exists()

    try:
        # Guard: refuse to overwrite without force flag
        if not force and (db_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if db_exists:
                console.print(f"  Database already exists: {db_path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'branchgoals init --force' to overwrite[/yellow]")
            sys.exit(1)

        if config_exists:
            console.print(
                "[yellow]Resetting the config to the demo region. Custom PINs and settings will be lost.[/yellow]"
            )
        if db_exists:
            console.print("[dim]Existing branches, goals and entries are kept.[/dim]")

        run_full_init(db_path, config_path)

    except sqlite3.Error as e:
        logger.error("Init failed: %s", e)
        console.print(f"[red]Database error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)


def parse_goal_assignment(text: str) -> tuple[BranchId, Amount] | None:
    """Parse "branch=goal" into a branch id and non-negative goal.

    Returns:
        Tuple of (branch_id, goal), or None if invalid.
    """
    branch, sep, goal = text.partition("=")
    if not sep or not branch.strip():
        return None
    try:
        value = int(goal.strip())
    except ValueError:
        return None
    if value < 0:
        return None
    return BranchId(branch.strip()), Amount(value)


def render_goals(branches: list[Branch]) -> None:
    table = Table(title="Goals")
    table.add_column("Branch", style="cyan")
    table.add_column("Total", justify="right")
    table.add_column("Goal", justify="right")

    for branch in branches:
        table.add_row(branch.name, f"{branch.total:,}", f"{branch.goal:,}")

    console.print(table)
    console.print(f"\n[bold]Regional goal:[/bold] {regional_goal(branches):,} [dim](sum of branch goals)[/dim]")


def goals_command(pin: str | None = None, assignments: list[str] | None = None) -> None:
    """Show branch goals, or set them with branch=goal assignments."""
    settings = load_settings_or_exit()
    require_admin(pin, settings)
    db_path = db_path_or_exit()

    try:
        branches = list_branches(db_path)
    except sqlite3.Error as e:
        fail_persistence("Load goals", e)

    if assignments:
        known = {b.id for b in branches}
        updates: list[tuple[BranchId, Amount]] = []
        for text in assignments:
            parsed = parse_goal_assignment(text)
            if parsed is None:
                console.print(f"[red]Invalid goal '{text}'. Use branch=goal with a whole number >= 0[/red]")
                sys.exit(1)
            if parsed[0] not in known:
                console.print(f"[red]Unknown branch: {parsed[0]}[/red]")
                sys.exit(1)
            updates.append(parsed)

        try:
            for branch_id, goal in updates:
                update_branch_goal(branch_id, goal, db_path)
                logger.info("Goal for %s set to %d", branch_id, goal)
            branches = list_branches(db_path)
            total_goal = get_regional_goal(db_path)
        except sqlite3.Error as e:
            fail_persistence("Save goals", e)

        console.print(f"[green]✓[/green] Goals saved. Regional goal is now {total_goal:,}\n")

    render_goals(branches)


def entries_command(pin: str | None = None, deleted_only: bool = False) -> None:
    """List all entries with their status."""
    settings = load_settings_or_exit()
    require_admin(pin, settings)
    tz = zone_or_exit(settings)
    db_path = db_path_or_exit()

    try:
        branches = list_branches(db_path)
        entries = list_entries(db_path)
    except sqlite3.Error as e:
        fail_persistence("Load entries", e)

    if deleted_only:
        entries = [e for e in entries if e.is_deleted]

    if not entries:
        console.print("[yellow]No entries found[/yellow]")
        return

    names = {b.id: b.name for b in branches}
    table = Table(title=f"All entries (showing {len(entries)})")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Date", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_column("Branches", style="magenta")
    table.add_column("Note", style="dim")
    table.add_column("Status", justify="center")

    for entry in entries:
        status = "[red]deleted[/red]" if entry.is_deleted else "[green]active[/green]"
        table.add_row(
            entry.id,
            format_medium_datetime(entry.timestamp, tz),
            f"{entry.amount:,}",
            format_allocations(entry, names),
            entry.note or "-",
            status,
        )

    console.print(table)


def delete_command(entry_id: str, pin: str | None = None) -> None:
    """Soft-delete an entry (restorable)."""
    settings = load_settings_or_exit()
    require_admin(pin, settings)
    db_path = db_path_or_exit()

    try:
        found = soft_delete_entry(entry_id, db_path)
    except sqlite3.Error as e:
        fail_persistence("Delete the entry", e)

    if not found:
        console.print(f"[red]Entry {entry_id} not found[/red]")
        sys.exit(1)

    console.print("[green]✓[/green] Entry moved to Deleted")
    console.print(f"[dim]Undo with 'branchgoals restore {entry_id}'[/dim]")


def restore_command(entry_id: str, pin: str | None = None) -> None:
    """Restore a soft-deleted entry."""
    settings = load_settings_or_exit()
    require_admin(pin, settings)
    db_path = db_path_or_exit()

    try:
        found = restore_entry(entry_id, db_path)
    except sqlite3.Error as e:
        fail_persistence("Restore the entry", e)

    if not found:
        console.print(f"[red]Entry {entry_id} not found[/red]")
        sys.exit(1)

    console.print("[green]✓[/green] Entry restored")


def purge_command(entry_id: str, pin: str | None = None, yes: bool = False) -> None:
    """Permanently delete an entry and its allocations after confirmation."""
    settings = load_settings_or_exit()
    require_admin(pin, settings)
    tz = zone_or_exit(settings)
    db_path = db_path_or_exit()

    try:
        entry = get_entry(entry_id, db_path)
    except sqlite3.Error as e:
        fail_persistence("Load the entry", e)

    if entry is None:
        console.print(f"[red]Entry {entry_id} not found[/red]")
        sys.exit(1)

    console.print(f"  Date: {format_medium_datetime(entry.timestamp, tz)}")
    console.print(f"  Amount: {entry.amount:,}")

    if not yes and not typer.confirm("Delete permanently? This cannot be undone.", default=False):
        console.print("[dim]Cancelled[/dim]")
        return

    try:
        hard_delete_entry(entry_id, db_path)
    except sqlite3.Error as e:
        fail_persistence("Delete the entry", e)

    console.print("[green]✓[/green] Entry permanently deleted")
