"""Domain type definitions for branchgoals.

These NewTypes provide semantic clarity and help with type checking:
- Amount: Whole monetary units (no fractional amounts)
- BranchId: Stable string key of a branch (e.g., "santiago")
- EntryId: UUID string of a recorded entry
- Timestamp: Point in time as epoch milliseconds
"""

from dataclasses import dataclass
from typing import NewType

# Amounts are whole units; there is no fractional or multi-currency support
Amount = NewType("Amount", int)

BranchId = NewType("BranchId", str)

EntryId = NewType("EntryId", str)

# Epoch milliseconds, UTC
Timestamp = NewType("Timestamp", int)

# Per-entry cap for entries created with `add`
MAX_ENTRY_TOTAL = Amount(500)

MAX_BRANCHES_PER_ENTRY = 3


@dataclass(frozen=True)
class Branch:
    """Immutable branch snapshot.

    `total` is derived from non-deleted allocations and never stored.
    """

    id: BranchId
    name: str
    color: str = ""
    goal: Amount = Amount(0)
    total: Amount = Amount(0)


@dataclass(frozen=True)
class Allocation:
    """Part of one entry's total attributed to one branch."""

    branch_id: BranchId
    amount: Amount


@dataclass(frozen=True)
class Entry:
    """Immutable entry snapshot."""

    id: EntryId
    timestamp: Timestamp
    allocations: tuple[Allocation, ...]
    note: str | None = None
    is_deleted: bool = False
    # Reserved, nothing populates these yet
    submitted_by: str | None = None
    sync_status: str | None = None

    @property
    def amount(self) -> Amount:
        return Amount(sum(a.amount for a in self.allocations))

    def amount_for(self, branch_id: BranchId) -> Amount:
        """Sum of this entry's allocations addressed to one branch."""
        return Amount(sum(a.amount for a in self.allocations if a.branch_id == branch_id))
