"""Tests for branchgoals.store against a temporary SQLite database."""

import sqlite3
from pathlib import Path

import pytest

from branchgoals.config import DEFAULT_BRANCHES
from branchgoals.domain.models import Allocation, Amount, BranchId, Timestamp
from branchgoals.store import (
    add_entry,
    get_entry,
    get_regional_goal,
    hard_delete_entry,
    init_database,
    list_branches,
    list_entries,
    restore_entry,
    seed_branches,
    soft_delete_entry,
    update_branch_goal,
)


def alloc(branch_id: str, amount: int) -> Allocation:
    return Allocation(BranchId(branch_id), Amount(amount))


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "data" / "branchgoals.db"
    init_database(path)
    seed_branches(DEFAULT_BRANCHES, path)
    return path


class TestSchema:
    """Tests for init_database and seed_branches."""

    def test_creates_parent_directories(self, db_path: Path) -> None:
        assert db_path.exists()

    def test_init_is_idempotent(self, db_path: Path) -> None:
        init_database(db_path)
        assert len(list_branches(db_path)) == 5

    def test_seed_skips_existing(self, db_path: Path) -> None:
        assert seed_branches(DEFAULT_BRANCHES, db_path) == 0

    def test_branches_keep_configured_order(self, db_path: Path) -> None:
        assert [b.id for b in list_branches(db_path)] == ["santiago", "moca", "la-vega", "jarabacoa", "puerto-plata"]


class TestGoals:
    """Tests for goal queries."""

    def test_regional_goal_is_sum(self, db_path: Path) -> None:
        assert get_regional_goal(db_path) == 1000

    def test_update_goal_changes_regional_goal(self, db_path: Path) -> None:
        assert update_branch_goal(BranchId("moca"), Amount(450), db_path)
        assert get_regional_goal(db_path) == 1250

    def test_update_unknown_branch(self, db_path: Path) -> None:
        assert not update_branch_goal(BranchId("nowhere"), Amount(10), db_path)

    def test_negative_goal_rejected(self, db_path: Path) -> None:
        with pytest.raises(sqlite3.IntegrityError):
            update_branch_goal(BranchId("moca"), Amount(-1), db_path)
        assert get_regional_goal(db_path) == 1000


class TestEntries:
    """Tests for entry persistence."""

    def test_add_and_get(self, db_path: Path) -> None:
        entry_id = add_entry(Timestamp(1000), [alloc("moca", 8), alloc("santiago", 2)], "raffle", db_path)

        entry = get_entry(entry_id, db_path)

        assert entry is not None
        assert entry.timestamp == 1000
        assert entry.note == "raffle"
        assert entry.allocations == (alloc("moca", 8), alloc("santiago", 2))
        assert not entry.is_deleted

    def test_blank_note_stored_as_none(self, db_path: Path) -> None:
        entry_id = add_entry(Timestamp(1000), [alloc("moca", 1)], "", db_path)
        entry = get_entry(entry_id, db_path)
        assert entry is not None
        assert entry.note is None

    def test_get_missing_entry(self, db_path: Path) -> None:
        assert get_entry("missing", db_path) is None

    def test_list_newest_first(self, db_path: Path) -> None:
        older = add_entry(Timestamp(1000), [alloc("moca", 1)], None, db_path)
        newer = add_entry(Timestamp(2000), [alloc("moca", 1)], None, db_path)

        assert [e.id for e in list_entries(db_path)] == [newer, older]

    def test_totals_from_allocations(self, db_path: Path) -> None:
        add_entry(Timestamp(1000), [alloc("moca", 8), alloc("santiago", 2)], None, db_path)
        add_entry(Timestamp(2000), [alloc("moca", 5)], None, db_path)

        totals = {b.id: b.total for b in list_branches(db_path)}

        assert totals["moca"] == 13
        assert totals["santiago"] == 2
        assert totals["la-vega"] == 0

    def test_unknown_branch_writes_nothing(self, db_path: Path) -> None:
        """Should roll back the entry when an allocation fails."""
        with pytest.raises(sqlite3.IntegrityError):
            add_entry(Timestamp(1000), [alloc("moca", 5), alloc("nowhere", 5)], None, db_path)

        assert list_entries(db_path) == []


class TestDeletion:
    """Tests for soft delete, restore and hard delete."""

    def test_soft_delete_excludes_from_totals(self, db_path: Path) -> None:
        entry_id = add_entry(Timestamp(1000), [alloc("moca", 10)], None, db_path)

        assert soft_delete_entry(entry_id, db_path)

        totals = {b.id: b.total for b in list_branches(db_path)}
        assert totals["moca"] == 0
        entry = get_entry(entry_id, db_path)
        assert entry is not None
        assert entry.is_deleted

    def test_restore_brings_totals_back(self, db_path: Path) -> None:
        entry_id = add_entry(Timestamp(1000), [alloc("moca", 10)], None, db_path)
        soft_delete_entry(entry_id, db_path)

        assert restore_entry(entry_id, db_path)

        totals = {b.id: b.total for b in list_branches(db_path)}
        assert totals["moca"] == 10

    def test_soft_delete_missing(self, db_path: Path) -> None:
        assert not soft_delete_entry("missing", db_path)
        assert not restore_entry("missing", db_path)

    def test_hard_delete_cascades(self, db_path: Path) -> None:
        entry_id = add_entry(Timestamp(1000), [alloc("moca", 7), alloc("santiago", 3)], None, db_path)
        keep_id = add_entry(Timestamp(2000), [alloc("moca", 1)], None, db_path)

        assert hard_delete_entry(entry_id, db_path)

        assert get_entry(entry_id, db_path) is None
        conn = sqlite3.connect(db_path)
        try:
            remaining = conn.execute("SELECT entry_id FROM entry_allocations").fetchall()
        finally:
            conn.close()
        assert remaining == [(keep_id,)]

    def test_hard_delete_missing(self, db_path: Path) -> None:
        assert not hard_delete_entry("missing", db_path)
