"""Achievement badges derived from branch and entry state.

Badges are never stored. Each rule is a named predicate evaluated against
the current snapshot on every read.
"""

from collections.abc import Callable
from dataclasses import dataclass

from branchgoals.domain.models import Branch, BranchId, Entry, Timestamp
from branchgoals.domain.report import weekly_increments

BadgeCheck = Callable[[Branch, list[Entry], list[Branch], Timestamp], bool]

ENCOURAGEMENT = "💪 Let's make this an incredible week!"


@dataclass(frozen=True)
class BadgeRule:
    """Named predicate over (branch, entries, all branches, now)."""

    id: str
    name: str
    icon: str
    description: str
    check: BadgeCheck


@dataclass(frozen=True)
class Badge:
    """Immutable earned badge."""

    id: str
    name: str
    icon: str
    branch_id: BranchId | None = None


def reached_goal(branch: Branch, entries: list[Entry], all_branches: list[Branch], now: Timestamp) -> bool:
    # Zero goals are never reached
    return branch.goal > 0 and branch.total >= branch.goal


def reached_half_goal(branch: Branch, entries: list[Entry], all_branches: list[Branch], now: Timestamp) -> bool:
    return branch.goal > 0 and branch.total >= 0.5 * branch.goal


def top_of_week(branch: Branch, entries: list[Entry], all_branches: list[Branch], now: Timestamp) -> bool:
    """True when the branch shares the largest positive trailing-week sum."""
    increments = weekly_increments(all_branches, entries, now)
    branch_inc = increments.get(branch.id, 0)
    max_inc = max(increments.values(), default=0)
    return branch_inc > 0 and branch_inc == max_inc


BADGE_RULES: tuple[BadgeRule, ...] = (
    BadgeRule(
        id="reach_goal",
        name="Goal Reached",
        icon="🏁",
        description="Branch reached its goal.",
        check=reached_goal,
    ),
    BadgeRule(
        id="half_way",
        name="Half of Goal",
        icon="🎯",
        description="Branch passed 50% of its goal.",
        check=reached_half_goal,
    ),
    BadgeRule(
        id="strong_week_top",
        name="Branch of the Week",
        icon="🏆",
        description="Branch with the most progress in the last 7 days.",
        check=top_of_week,
    ),
)


def evaluate_branch_badges(
    branch: Branch,
    entries: list[Entry],
    all_branches: list[Branch],
    now: Timestamp,
    rules: tuple[BadgeRule, ...] = BADGE_RULES,
) -> list[Badge]:
    """Badges one branch has earned, in rule order."""
    return [
        Badge(id=rule.id, name=rule.name, icon=rule.icon, branch_id=branch.id)
        for rule in rules
        if rule.check(branch, entries, all_branches, now)
    ]


def regional_badges(
    branches: list[Branch],
    entries: list[Entry],
    now: Timestamp,
    rules: tuple[BadgeRule, ...] = BADGE_RULES,
) -> list[Badge]:
    """Badges earned by any branch, one per rule.

    Args:
        branches: Branch snapshots with derived totals.
        entries: All entries (deleted ones never count).
        now: Current time in epoch milliseconds.
        rules: Rules to evaluate.

    Returns:
        Badges in rule order, each credited to the first achieving branch.
    """
    earned: list[Badge] = []
    for rule in rules:
        for branch in branches:
            if rule.check(branch, entries, branches, now):
                earned.append(Badge(id=rule.id, name=rule.name, icon=rule.icon, branch_id=branch.id))
                break
    return earned


def weekly_highlight(branches: list[Branch], entries: list[Entry], now: Timestamp) -> str:
    """One-line summary of the strongest branch over the last 7 days.

    The first branch with the strictly largest positive sum wins. With no
    activity a generic encouragement is returned instead.
    """
    increments = weekly_increments(branches, entries, now)

    strongest: Branch | None = None
    strongest_total = 0
    for branch in branches:
        if increments[branch.id] > strongest_total:
            strongest = branch
            strongest_total = increments[branch.id]

    if strongest is None:
        return ENCOURAGEMENT
    return f"🏆 Strongest week: {strongest.name} with {strongest_total:,}."
