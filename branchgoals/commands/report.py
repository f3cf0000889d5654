"""Report command for period-by-branch breakdowns."""

import sqlite3
import sys
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pandas as pd
from rich.console import Console, Group, RenderableType
from rich.table import Table
from rich.text import Text

from branchgoals.commands.access import (
    db_path_or_exit,
    fail_persistence,
    load_settings_or_exit,
    load_snapshot,
    zone_or_exit,
)
from branchgoals.commands.dashboard import run_live
from branchgoals.dates import GRANULARITIES, current_week_range, format_medium_date, parse_date
from branchgoals.domain.models import Branch, Entry
from branchgoals.domain.report import ReportRow, build_report_rows, totals_by_period

console = Console()


def compute_report_window(
    all: bool,
    date_from: str | None,
    date_to: str | None,
    tz: ZoneInfo,
) -> tuple[date | None, date | None, str]:
    """Compute the date window and its display label.

    Missing bounds fall back to the current week (Monday to Sunday).

    Returns:
        Tuple of (date_from, date_to, period_display).

    Raises:
        ValueError: If a date is malformed or the window is reversed.
    """
    if all:
        return None, None, "All Time"

    week_start, week_end = current_week_range(datetime.now(tz), tz)
    start = parse_date(date_from) if date_from else week_start
    end = parse_date(date_to) if date_to else week_end

    if start > end:
        raise ValueError("--from must not be after --to")

    return start, end, f"{format_medium_date(start)} – {format_medium_date(end)}"


def format_percentage_with_color(percentage: float) -> str:
    """Format goal percentage with color based on progress."""
    text = f"{percentage:.1f}%"
    if percentage >= 100:
        return f"[green]{text}[/green]"
    elif percentage >= 50:
        return f"[yellow]{text}[/yellow]"
    else:
        return text


def render_report(rows: list[ReportRow], title: str) -> RenderableType:
    """Build one table per period with a total row."""
    if not rows:
        return Text("No data in the selected range.", style="dim")

    totals = totals_by_period(rows)
    tables: list[RenderableType] = [Text(title, style="bold cyan")]

    for period, total in totals.items():
        table = Table(title=period, title_justify="left")
        table.add_column("Branch", style="white")
        table.add_column("Amount", justify="right")
        table.add_column("% of Goal", justify="right")

        for row in rows:
            if row.period == period:
                table.add_row(row.branch_name, f"{row.amount:,}", format_percentage_with_color(row.percentage))

        table.add_section()
        table.add_row("[bold]Total[/bold]", f"[bold]{total:,}[/bold]", "[dim]-[/dim]")
        tables.append(table)

    return Group(*tables)


def export_report_csv(rows: list[ReportRow], csv_path: Path) -> None:
    """Write report rows to a CSV file.

    Raises:
        OSError: If the file cannot be written.
    """
    columns = ["period", "branch_id", "branch_name", "amount", "percentage"]
    records = [{**asdict(row), "percentage": round(row.percentage, 1)} for row in rows]
    df = pd.DataFrame(records, columns=columns)
    df.to_csv(csv_path, index=False)


def report_command(
    granularity: str = "week",
    all: bool = False,
    date_from: str | None = None,
    date_to: str | None = None,
    csv_path: str | None = None,
    watch: bool = False,
    interval: float | None = None,
) -> None:
    """Generate the period-by-branch report."""
    if granularity not in GRANULARITIES:
        console.print(f"[red]Unknown granularity '{granularity}'. Use one of: {', '.join(GRANULARITIES)}[/red]")
        sys.exit(1)

    settings = load_settings_or_exit()
    tz = zone_or_exit(settings)
    db_path = db_path_or_exit()

    try:
        start, end, period = compute_report_window(all, date_from, date_to, tz)
    except ValueError as e:
        console.print(f"[red]Invalid date range: {e}[/red]")
        console.print("[dim]Dates use YYYY-MM-DD[/dim]")
        sys.exit(1)

    def build(snapshot: tuple[list[Branch], list[Entry]]) -> list[ReportRow]:
        branches, entries = snapshot
        return build_report_rows(entries, branches, granularity, start, end, tz)

    try:
        snapshot = load_snapshot(db_path)
    except sqlite3.Error as e:
        fail_persistence("Load the report", e)

    rows = build(snapshot)

    if csv_path:
        try:
            export_report_csv(rows, Path(csv_path).expanduser())
        except OSError as e:
            console.print(f"[red]Export failed: {e}[/red]", style="bold")
            sys.exit(1)
        console.print(f"[green]✓[/green] Exported {len(rows)} rows to {csv_path}")
        return

    if not watch:
        console.print(render_report(rows, period))
        return

    run_live(
        render_report(rows, period),
        lambda: load_snapshot(db_path),
        lambda snap: render_report(build(snap), period),
        interval or settings["refresh_interval"],
    )
