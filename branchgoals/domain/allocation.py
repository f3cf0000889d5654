"""Pure functions for splitting an entry total across branches.

This module contains the functional core for entry creation:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All amounts are whole units (Amount type).
"""

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from fractions import Fraction

from branchgoals.domain.models import MAX_BRANCHES_PER_ENTRY, MAX_ENTRY_TOTAL, Allocation, Amount, BranchId


@dataclass(frozen=True)
class SplitChoice:
    """A branch selected for an entry, with the optional amount the user typed.

    An amount of 0 means the user left it blank.
    """

    branch_id: BranchId
    amount: Amount = Amount(0)


def parse_amount_text(text: str | None) -> Amount:
    """Parse a typed per-branch amount, keeping digits only.

    Args:
        text: Raw user input.

    Returns:
        The amount, or 0 when nothing numeric was typed.
    """
    digits = re.sub(r"[^0-9]", "", text or "")
    return Amount(int(digits)) if digits else Amount(0)


def parse_branch_choice(text: str) -> SplitChoice:
    """Parse "branch" or "branch:amount" into a SplitChoice.

    Args:
        text: Branch id, optionally followed by a colon and an amount.

    Returns:
        SplitChoice for the branch.
    """
    branch, _, amount = text.partition(":")
    return SplitChoice(branch_id=BranchId(branch.strip()), amount=parse_amount_text(amount))


def validate_entry(
    total: int | None,
    choices: list[SplitChoice],
    known_branches: Iterable[BranchId] | None = None,
) -> tuple[bool, str | None]:
    """Validate an entry before it is normalized and saved.

    Args:
        total: Entry total typed by the user.
        choices: Selected branches in selection order.
        known_branches: Branch ids that exist. If None, ids are not checked.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not total or total <= 0:
        return False, "Enter a valid total."

    if total > MAX_ENTRY_TOTAL:
        return False, f"The maximum per entry is {MAX_ENTRY_TOTAL}."

    if not choices:
        return False, "Select at least one branch."

    branch_ids = [c.branch_id for c in choices]
    if len(branch_ids) != len(set(branch_ids)):
        return False, "Duplicate branches. Select different branches."

    if len(choices) > MAX_BRANCHES_PER_ENTRY:
        return False, f"Maximum {MAX_BRANCHES_PER_ENTRY} branches per entry."

    if known_branches is not None:
        known = set(known_branches)
        for branch_id in branch_ids:
            if branch_id not in known:
                return False, f"Unknown branch: {branch_id}"

    return True, None


def calculate_raw_shares(total: Amount, choices: list[SplitChoice]) -> list[Fraction]:
    """Calculate exact fractional shares for each choice.

    Shares follow the typed amounts when any is positive, otherwise the
    total is split equally.
    """
    sum_entered = sum(max(c.amount, 0) for c in choices)

    if sum_entered > 0:
        return [Fraction(total * max(c.amount, 0), sum_entered) for c in choices]

    equal = Fraction(total, len(choices))
    return [equal for _ in choices]


def normalize_allocations(total: Amount, choices: list[SplitChoice]) -> list[Allocation]:
    """Split a total into whole amounts that add up to exactly the total.

    Largest remainder apportionment: every share is floored, then the units
    lost to flooring go one each to the shares with the largest fractional
    parts. Equal fractional parts keep selection order. The result is in
    selection order.

    Args:
        total: Validated entry total.
        choices: Selected branches in selection order.

    Returns:
        One Allocation per choice, amounts summing to `total` when total >= 0.
    """
    if not choices:
        return []

    if total <= 0:
        return [Allocation(branch_id=c.branch_id, amount=Amount(0)) for c in choices]

    shares = calculate_raw_shares(total, choices)
    floors = [math.floor(share) for share in shares]
    remainder = total - sum(floors)

    # sorted() is stable, so equal fractions stay in selection order
    by_fraction = sorted(range(len(shares)), key=lambda i: shares[i] - floors[i], reverse=True)
    for i in by_fraction[:remainder]:
        floors[i] += 1

    return [Allocation(branch_id=c.branch_id, amount=Amount(amount)) for c, amount in zip(choices, floors)]
