"""Pure functions for report calculations and aggregations.

This module contains the functional core for reporting operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All amounts are whole units (Amount type).
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from zoneinfo import ZoneInfo

from branchgoals.dates import TOTAL_LABEL, day_window, get_zone, period_for
from branchgoals.domain.models import Amount, Branch, BranchId, Entry, Timestamp

WEEK_MS = 7 * 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class ReportRow:
    """Immutable report row for one branch in one period."""

    period: str
    branch_id: BranchId
    branch_name: str
    amount: Amount
    percentage: float


@dataclass(frozen=True)
class RegionalSummary:
    """Immutable regional progress summary."""

    total: Amount
    goal: Amount
    remaining: Amount
    percentage: float


def regional_goal(branches: list[Branch]) -> Amount:
    """Regional goal, always the sum of the branch goals."""
    return Amount(sum(b.goal for b in branches))


def calculate_goal_percentage(amount: Amount, goal: Amount, fallback_goal: Amount = Amount(0)) -> float:
    """Calculate percentage of a goal, falling back to a second goal.

    Args:
        amount: Amount achieved.
        goal: Branch goal.
        fallback_goal: Goal used when the branch goal is not positive.

    Returns:
        Percentage (0-100+), or 0.0 when neither goal is positive.
    """
    if goal > 0:
        return amount / goal * 100
    if fallback_goal > 0:
        return amount / fallback_goal * 100
    return 0.0


def active_entries(entries: list[Entry]) -> list[Entry]:
    """Entries that count towards totals (not soft-deleted)."""
    return [e for e in entries if not e.is_deleted]


def filter_entries_by_window(
    entries: list[Entry],
    date_from: date | None,
    date_to: date | None,
    tz: ZoneInfo,
) -> list[Entry]:
    """Keep non-deleted entries inside an inclusive local date window.

    Args:
        entries: All entries.
        date_from: First local day included. If None, no window is applied.
        date_to: Last local day included. If None, no window is applied.
        tz: Time zone of the window.

    Returns:
        Filtered entries, input order preserved.
    """
    entries = active_entries(entries)
    if date_from is None or date_to is None:
        return entries

    start, end = day_window(date_from, date_to, tz)
    return [e for e in entries if start <= e.timestamp <= end]


def compute_branch_totals(branches: list[Branch], entries: list[Entry]) -> list[Branch]:
    """Recompute every branch total from non-deleted allocations.

    Returns:
        New Branch snapshots with `total` set, branch order preserved.
    """
    sums: dict[BranchId, int] = defaultdict(int)
    for entry in active_entries(entries):
        for allocation in entry.allocations:
            sums[allocation.branch_id] += allocation.amount

    return [
        Branch(id=b.id, name=b.name, color=b.color, goal=b.goal, total=Amount(sums.get(b.id, 0))) for b in branches
    ]


def weekly_increments(branches: list[Branch], entries: list[Entry], now: Timestamp) -> dict[BranchId, Amount]:
    """Sum each branch's allocations from the trailing 7x24h window.

    Args:
        branches: Branches to report on.
        entries: All entries (deleted ones are skipped).
        now: Current time in epoch milliseconds.

    Returns:
        Dictionary mapping branch id to amount, one key per branch.
    """
    week_ago = now - WEEK_MS
    recent = [e for e in active_entries(entries) if e.timestamp >= week_ago]
    return {b.id: Amount(sum(e.amount_for(b.id) for e in recent)) for b in branches}


def build_report_rows(
    entries: list[Entry],
    branches: list[Branch],
    granularity: str,
    date_from: date | None = None,
    date_to: date | None = None,
    tz: ZoneInfo | None = None,
) -> list[ReportRow]:
    """Bucket entries by period and branch.

    Every period holding at least one entry gets a row for every branch,
    including zero amounts. The "total" granularity collapses all periods
    into a single "Total" period that is emitted even with no entries.

    Args:
        entries: All entries (deleted ones are skipped).
        branches: Branches in display order.
        granularity: One of "day", "week", "month" or "total".
        date_from: First local day included.
        date_to: Last local day included.
        tz: Time zone for windows and period boundaries.

    Returns:
        Rows ordered by period start, then branch order.

    Raises:
        ValueError: If granularity is unknown.
    """
    if tz is None:
        tz = get_zone()

    goal_fallback = regional_goal(branches)
    filtered = filter_entries_by_window(entries, date_from, date_to, tz)

    sums: dict[tuple[date, str], dict[BranchId, int]] = {}
    for entry in filtered:
        period = period_for(entry.timestamp, granularity, tz)
        bucket = sums.setdefault(period, defaultdict(int))
        for allocation in entry.allocations:
            bucket[allocation.branch_id] += allocation.amount

    if granularity == "total":
        periods = [(date.min, TOTAL_LABEL)]
        sums.setdefault(periods[0], defaultdict(int))
    else:
        periods = sorted(sums)

    rows: list[ReportRow] = []
    for period in periods:
        _, label = period
        bucket = sums[period]
        for branch in branches:
            amount = Amount(bucket.get(branch.id, 0))
            rows.append(
                ReportRow(
                    period=label,
                    branch_id=branch.id,
                    branch_name=branch.name,
                    amount=amount,
                    percentage=calculate_goal_percentage(amount, branch.goal, goal_fallback),
                )
            )

    return rows


def totals_by_period(rows: list[ReportRow]) -> dict[str, Amount]:
    """Sum report rows per period label, in row order."""
    totals: dict[str, int] = {}
    for row in rows:
        totals[row.period] = totals.get(row.period, 0) + row.amount
    return {period: Amount(total) for period, total in totals.items()}


def compute_regional_summary(branches: list[Branch]) -> RegionalSummary:
    """Summarize regional progress from branch snapshots."""
    total = Amount(sum(b.total for b in branches))
    goal = regional_goal(branches)

    return RegionalSummary(
        total=total,
        goal=goal,
        remaining=Amount(max(goal - total, 0)),
        percentage=calculate_goal_percentage(total, goal),
    )


def sort_branches_for_display(branches: list[Branch], featured: BranchId | None = None) -> list[Branch]:
    """Featured branch first, then the rest alphabetically by name."""
    return sorted(branches, key=lambda b: (b.id != featured, b.name.casefold()))
