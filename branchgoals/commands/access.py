"""PIN access command and shared command helpers."""

import logging
import sqlite3
import sys
import tomllib
from pathlib import Path
from typing import Any, NoReturn
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import typer
from rich.console import Console
from rich.errors import StyleSyntaxError
from rich.style import Style
from rich.table import Table

from branchgoals.config import get_pin_table, load_settings
from branchgoals.dates import format_medium_datetime, get_zone
from branchgoals.domain.access import PUBLIC, AccessContext, can_manage, visible_entries
from branchgoals.domain.models import Branch, Entry
from branchgoals.domain.report import compute_regional_summary
from branchgoals.store.queries import list_branches, list_entries
from branchgoals.store.schema import database_exists, get_db_path

console = Console()
logger = logging.getLogger(__name__)

RECENT_ENTRIES_LIMIT = 20


def load_settings_or_exit() -> dict[str, Any]:
    """Load settings, exiting with a hint if branchgoals isn't initialized."""
    try:
        return load_settings()
    except FileNotFoundError:
        console.print("[red]Config not found. Run 'branchgoals init' first.[/red]", style="bold")
        sys.exit(1)
    except tomllib.TOMLDecodeError as e:
        console.print(f"[red]Invalid config file: {e}[/red]", style="bold")
        sys.exit(1)


def zone_or_exit(settings: dict[str, Any]) -> ZoneInfo:
    """Get the configured time zone, exiting if the name is unknown."""
    try:
        return get_zone(settings["timezone"])
    except (ZoneInfoNotFoundError, ValueError):
        console.print(f"[red]Unknown time zone in config: {settings['timezone']}[/red]", style="bold")
        sys.exit(1)


def db_path_or_exit() -> Path:
    """Get the database path, exiting with a hint if it doesn't exist."""
    db_path = get_db_path()
    if not database_exists(db_path):
        console.print("[red]Database not found. Run 'branchgoals init' first.[/red]", style="bold")
        sys.exit(1)
    return db_path


def fail_persistence(action: str, error: sqlite3.Error) -> NoReturn:
    """Report a storage failure once and exit."""
    logger.error("%s failed: %s", action, error)
    console.print(f"[red]Could not {action.lower()}. Please try again later.[/red]", style="bold")
    sys.exit(1)


def load_snapshot(db_path: Path) -> tuple[list[Branch], list[Entry]]:
    """Read branches and entries in one go.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    return list_branches(db_path), list_entries(db_path)


def authorize(pin: str | None, settings: dict[str, Any]) -> AccessContext:
    """Resolve a PIN to an access context, prompting if none was given."""
    if pin is None:
        pin = typer.prompt("Enter your PIN", hide_input=True)

    if not pin.strip():
        console.print("[red]Enter a PIN[/red]")
        sys.exit(1)

    access = get_pin_table(settings).resolve(pin)
    if access is None:
        console.print("[red]Invalid PIN[/red]")
        sys.exit(1)

    logger.debug("Access granted: %s", access.role)
    return access


def require_admin(pin: str | None, settings: dict[str, Any]) -> AccessContext:
    """Resolve a PIN and exit unless it grants admin access."""
    access = authorize(pin, settings)
    if not can_manage(access):
        console.print("[red]Admin access required[/red]", style="bold")
        sys.exit(1)
    return access


def branch_style(color: str) -> str:
    """Use a configured branch color as a rich style, ignoring unknown colors."""
    try:
        Style.parse(color)
    except StyleSyntaxError:
        return ""
    return color


def format_allocations(entry: Entry, names: dict[str, str]) -> str:
    return ", ".join(f"{names.get(a.branch_id, a.branch_id)}: {a.amount:,}" for a in entry.allocations)


def access_command(pin: str | None = None) -> None:
    """Show the summary and entries available to a PIN."""
    settings = load_settings_or_exit()
    access = authorize(pin, settings)
    db_path = db_path_or_exit()
    tz = zone_or_exit(settings)

    try:
        branches, entries = load_snapshot(db_path)
    except sqlite3.Error as e:
        fail_persistence("Load data", e)

    names = {b.id: b.name for b in branches}
    my_branch = next((b for b in branches if b.id == access.branch_id), None)

    role_display = access.role
    if my_branch:
        role_display += f" ({my_branch.name})"
    console.print(f"[bold cyan]Role:[/bold cyan] {role_display}\n")

    summary = compute_regional_summary(branches)
    console.print(f"[bold]Regional total:[/bold] {summary.total:,}")
    if my_branch:
        console.print(f"[bold]{my_branch.name}:[/bold] {my_branch.total:,} / {my_branch.goal:,}")
    else:
        console.print(f"[bold]Regional goal:[/bold] {summary.goal:,}")

    if access.role == PUBLIC:
        console.print("\n[dim]Public access is read-only[/dim]")
        return

    recent = visible_entries(entries, access)[:RECENT_ENTRIES_LIMIT]
    if not recent:
        console.print("\n[yellow]No entries yet[/yellow]")
        return

    table = Table(title=f"Recent entries (showing {len(recent)})")
    table.add_column("Date", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_column("Branches", style="magenta")
    table.add_column("Note", style="dim")

    for entry in recent:
        table.add_row(
            format_medium_datetime(entry.timestamp, tz),
            f"{entry.amount:,}",
            format_allocations(entry, names),
            entry.note or "-",
        )

    console.print()
    console.print(table)
