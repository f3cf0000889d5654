"""Domain models and types for branchgoals.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from branchgoals.domain.models import Allocation, Amount, Branch, BranchId, Entry, EntryId, Timestamp

__all__ = ["Allocation", "Amount", "Branch", "BranchId", "Entry", "EntryId", "Timestamp"]
