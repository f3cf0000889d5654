"""Dashboard command showing regional progress, branches and badges."""

import sqlite3
from collections.abc import Callable
from datetime import datetime
from typing import TypeVar

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from branchgoals.commands.access import (
    branch_style,
    db_path_or_exit,
    fail_persistence,
    load_settings_or_exit,
    load_snapshot,
    zone_or_exit,
)
from branchgoals.dates import to_timestamp
from branchgoals.domain.badges import evaluate_branch_badges, regional_badges, weekly_highlight
from branchgoals.domain.models import Branch, BranchId, Entry, Timestamp
from branchgoals.domain.report import compute_branch_totals, compute_regional_summary, sort_branches_for_display
from branchgoals.polling import RefreshTask

console = Console()

T = TypeVar("T")


def render_dashboard(
    branches: list[Branch],
    entries: list[Entry],
    now: Timestamp,
    featured: BranchId | None = None,
) -> RenderableType:
    """Build the dashboard view from a snapshot.

    Args:
        branches: Branch snapshots.
        entries: All entries (deleted ones never count).
        now: Current time in epoch milliseconds, for the weekly window.
        featured: Branch listed first.

    Returns:
        Renderable for console.print or Live.update.
    """
    branches = compute_branch_totals(branches, entries)
    summary = compute_regional_summary(branches)

    header = Table.grid(padding=(0, 2))
    header.add_column(justify="right", style="bold")
    header.add_column()
    header.add_row("Regional total", f"{summary.total:,}")
    header.add_row("Regional goal", f"{summary.goal:,}")
    header.add_row("Remaining", f"{summary.remaining:,}")
    header.add_row("Progress", f"{summary.percentage:.1f}%")
    bar = ProgressBar(total=max(summary.goal, 1), completed=min(summary.total, max(summary.goal, 1)), width=40)

    table = Table(title="Branches")
    table.add_column("Branch")
    table.add_column("Total", justify="right")
    table.add_column("Goal", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Badges")

    for branch in sort_branches_for_display(branches, featured):
        percentage = branch.total / branch.goal * 100 if branch.goal > 0 else 0.0
        icons = " ".join(b.icon for b in evaluate_branch_badges(branch, entries, branches, now))
        table.add_row(
            Text(branch.name, style=branch_style(branch.color)),
            f"{branch.total:,}",
            f"{branch.goal:,}",
            f"{percentage:.0f}%",
            icons,
        )

    names = {b.id: b.name for b in branches}
    badges = regional_badges(branches, entries, now)
    if badges:
        badge_line = "  ".join(f"{b.icon} {b.name} ({names.get(b.branch_id or '', '-')})" for b in badges)
    else:
        badge_line = "[dim]No badges yet[/dim]"

    return Group(
        Panel(Group(header, bar), title="Regional Goal Board", border_style="cyan"),
        table,
        Text.from_markup(f"[bold]Badges:[/bold] {badge_line}"),
        Text(weekly_highlight(branches, entries, now)),
    )


def dashboard_command(watch: bool = False, interval: float | None = None) -> None:
    """Show the dashboard once, or keep it refreshed until interrupted."""
    settings = load_settings_or_exit()
    tz = zone_or_exit(settings)
    db_path = db_path_or_exit()
    featured = settings.get("featured_branch")

    def render(snapshot: tuple[list[Branch], list[Entry]]) -> RenderableType:
        branches, entries = snapshot
        return render_dashboard(branches, entries, to_timestamp(datetime.now(tz)), featured)

    try:
        snapshot = load_snapshot(db_path)
    except sqlite3.Error as e:
        fail_persistence("Load the dashboard", e)

    if not watch:
        console.print(render(snapshot))
        return

    run_live(render(snapshot), lambda: load_snapshot(db_path), render, interval or settings["refresh_interval"])


def run_live(
    initial: RenderableType,
    load: Callable[[], T],
    render: Callable[[T], RenderableType],
    interval: float,
) -> None:
    """Re-render a view every interval until Ctrl+C."""
    with Live(initial, console=console, auto_refresh=False) as live:

        def apply(snapshot: T) -> None:
            live.update(render(snapshot), refresh=True)

        with RefreshTask(load, apply, interval) as task:
            try:
                task.run()
            except KeyboardInterrupt:
                pass

    console.print("[dim]Stopped refreshing[/dim]")
