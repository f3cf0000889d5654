"""Entry command for recording a contribution split across branches."""

import logging
import sqlite3
import sys
from datetime import datetime

import typer
from rich.console import Console

from branchgoals.commands.access import db_path_or_exit, fail_persistence, load_settings_or_exit, zone_or_exit
from branchgoals.dates import format_medium_datetime, parse_local_datetime, to_timestamp
from branchgoals.domain.allocation import (
    SplitChoice,
    normalize_allocations,
    parse_branch_choice,
    validate_entry,
)
from branchgoals.domain.models import MAX_BRANCHES_PER_ENTRY, MAX_ENTRY_TOTAL, Amount
from branchgoals.store.queries import add_entry, list_branches

console = Console()
logger = logging.getLogger(__name__)


def prompt_choices(branch_names: dict[str, str]) -> list[SplitChoice]:
    """Prompt for up to three branches with optional amounts."""
    console.print("[cyan]Branches:[/cyan] " + ", ".join(f"{bid} ({name})" for bid, name in branch_names.items()))
    console.print(f"[dim]Enter up to {MAX_BRANCHES_PER_ENTRY} as 'branch' or 'branch:amount'. Blank to finish.[/dim]")

    choices: list[SplitChoice] = []
    while len(choices) < MAX_BRANCHES_PER_ENTRY:
        raw = typer.prompt(f"Branch {len(choices) + 1}", default="", show_default=False)
        if not raw.strip():
            break
        choices.append(parse_branch_choice(raw))
    return choices


def add_command(
    total: int,
    branches: list[str] | None = None,
    note: str | None = None,
    when: str | None = None,
) -> None:
    """Validate, split and save a new entry."""
    settings = load_settings_or_exit()
    tz = zone_or_exit(settings)
    db_path = db_path_or_exit()

    try:
        known = list_branches(db_path)
    except sqlite3.Error as e:
        fail_persistence("Load branches", e)

    branch_names = {b.id: b.name for b in known}

    if branches:
        choices = [parse_branch_choice(b) for b in branches if b.strip()]
    else:
        choices = prompt_choices(branch_names)

    is_valid, error = validate_entry(total, choices, branch_names.keys())
    if not is_valid:
        console.print(f"[red]{error}[/red]")
        sys.exit(1)

    if when:
        try:
            timestamp = parse_local_datetime(when, tz)
        except ValueError:
            console.print(f"[red]Invalid date/time: {when}[/red]")
            console.print("[dim]Use YYYY-MM-DD or YYYY-MM-DDTHH:MM[/dim]")
            sys.exit(1)
    else:
        timestamp = to_timestamp(datetime.now(tz))

    allocations = normalize_allocations(Amount(total), choices)
    logger.debug("Normalized %s across %d branches: %s", total, len(allocations), allocations)

    try:
        entry_id = add_entry(timestamp, allocations, note, db_path)
    except sqlite3.Error as e:
        fail_persistence("Save the entry", e)

    console.print("[green]✓[/green] Entry saved:")
    console.print(f"  Date: {format_medium_datetime(timestamp, tz)}")
    console.print(f"  Total: {total:,} [dim](max {MAX_ENTRY_TOTAL})[/dim]")
    for allocation in allocations:
        console.print(f"  {branch_names[allocation.branch_id]}: {allocation.amount:,}")
    if note:
        console.print(f"  Note: {note}")
    console.print(f"[dim]ID: {entry_id}[/dim]")
