"""Database query functions."""

import sqlite3
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from branchgoals.domain.models import Allocation, Amount, Branch, BranchId, Entry, EntryId, Timestamp
from branchgoals.store.schema import get_db_path


@contextmanager
def _connect(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Open a database connection with row factory and foreign keys enabled.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Yields:
        Database connection, closed on exit.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()


def _entry_from_row(row: sqlite3.Row, allocations: list[Allocation]) -> Entry:
    return Entry(
        id=EntryId(row["id"]),
        timestamp=Timestamp(row["timestamp"]),
        note=row["note"] or None,
        allocations=tuple(allocations),
        is_deleted=bool(row["is_deleted"]),
    )


def seed_branches(branches: list[dict[str, Any]], db_path: Path | None = None) -> int:
    """Insert configured branches that don't exist yet.

    Args:
        branches: Branch dictionaries with id, name and optional color and goal.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Number of branches inserted.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            inserted = 0
            for position, branch in enumerate(branches):
                cursor.execute(
                    "INSERT OR IGNORE INTO branches (id, name, color, goal, position) VALUES (?, ?, ?, ?, ?)",
                    (branch["id"], branch["name"], branch.get("color", ""), int(branch.get("goal", 0)), position),
                )
                inserted += cursor.rowcount
            conn.commit()
            return inserted
        except sqlite3.Error:
            conn.rollback()
            raise


def list_branches(db_path: Path | None = None) -> list[Branch]:
    """Get all branches with totals derived from non-deleted allocations.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Branches in configured order.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT b.id, b.name, b.color, b.goal,
                   COALESCE(SUM(CASE WHEN e.is_deleted = 0 THEN a.amount END), 0) AS total
            FROM branches b
            LEFT JOIN entry_allocations a ON a.branch_id = b.id
            LEFT JOIN entries e ON e.id = a.entry_id
            GROUP BY b.id
            ORDER BY b.position, b.id
            """
        )
        return [
            Branch(
                id=BranchId(row["id"]),
                name=row["name"],
                color=row["color"],
                goal=Amount(row["goal"]),
                total=Amount(row["total"]),
            )
            for row in cursor.fetchall()
        ]


def get_regional_goal(db_path: Path | None = None) -> Amount:
    """Get the regional goal, the sum of all branch goals.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT COALESCE(SUM(goal), 0) FROM branches")
        return Amount(cursor.fetchone()[0])


def update_branch_goal(branch_id: BranchId, goal: Amount, db_path: Path | None = None) -> bool:
    """Set a branch goal.

    Args:
        branch_id: Branch ID.
        goal: New goal (non-negative).
        db_path: Path to the database file. If None, uses default location.

    Returns:
        True if the branch exists and was updated.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("UPDATE branches SET goal = ? WHERE id = ?", (goal, branch_id))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise


def add_entry(
    timestamp: Timestamp,
    allocations: list[Allocation],
    note: str | None = None,
    db_path: Path | None = None,
) -> EntryId:
    """Insert an entry and its allocations in one transaction.

    Args:
        timestamp: Entry time in epoch milliseconds.
        allocations: Normalized allocations.
        note: Optional free-text note.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        ID of the new entry.

    Raises:
        sqlite3.Error: If database operation fails. Nothing is written.
    """
    entry_id = EntryId(str(uuid.uuid4()))

    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute(
                "INSERT INTO entries (id, timestamp, note, is_deleted) VALUES (?, ?, ?, 0)",
                (entry_id, timestamp, note or None),
            )
            cursor.executemany(
                "INSERT INTO entry_allocations (entry_id, branch_id, amount) VALUES (?, ?, ?)",
                [(entry_id, a.branch_id, a.amount) for a in allocations],
            )
            conn.commit()
            return entry_id
        except sqlite3.Error:
            conn.rollback()
            raise


def list_entries(db_path: Path | None = None) -> list[Entry]:
    """Get all entries, deleted ones included.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Entries ordered newest first, allocations in insertion order.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT entry_id, branch_id, amount FROM entry_allocations ORDER BY id")
        allocations: dict[str, list[Allocation]] = {}
        for row in cursor.fetchall():
            allocations.setdefault(row["entry_id"], []).append(
                Allocation(branch_id=BranchId(row["branch_id"]), amount=Amount(row["amount"]))
            )

        cursor.execute("SELECT id, timestamp, note, is_deleted FROM entries ORDER BY timestamp DESC, created_at DESC")
        return [_entry_from_row(row, allocations.get(row["id"], [])) for row in cursor.fetchall()]


def get_entry(entry_id: str, db_path: Path | None = None) -> Entry | None:
    """Get a single entry by ID, deleted or not.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT id, timestamp, note, is_deleted FROM entries WHERE id = ?", (entry_id,))
        row = cursor.fetchone()
        if row is None:
            return None

        cursor.execute(
            "SELECT branch_id, amount FROM entry_allocations WHERE entry_id = ? ORDER BY id",
            (entry_id,),
        )
        allocations = [Allocation(branch_id=BranchId(r["branch_id"]), amount=Amount(r["amount"])) for r in cursor]
        return _entry_from_row(row, allocations)


def _set_deleted(entry_id: str, deleted: bool, db_path: Path | None) -> bool:
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("UPDATE entries SET is_deleted = ? WHERE id = ?", (int(deleted), entry_id))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise


def soft_delete_entry(entry_id: str, db_path: Path | None = None) -> bool:
    """Mark an entry as deleted (excluded from totals, restorable).

    Returns:
        True if the entry exists.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    return _set_deleted(entry_id, True, db_path)


def restore_entry(entry_id: str, db_path: Path | None = None) -> bool:
    """Clear an entry's deleted flag.

    Returns:
        True if the entry exists.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    return _set_deleted(entry_id, False, db_path)


def hard_delete_entry(entry_id: str, db_path: Path | None = None) -> bool:
    """Permanently delete an entry; its allocations go with it.

    Returns:
        True if the entry existed.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        cursor = conn.cursor()
        try:
            cursor.execute("DELETE FROM entries WHERE id = ?", (entry_id,))
            conn.commit()
            return cursor.rowcount > 0
        except sqlite3.Error:
            conn.rollback()
            raise
