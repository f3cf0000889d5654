"""Database store layer - provides persistence for the application.

This module re-exports all public database functions for easy importing.
"""

from branchgoals.store.queries import (
    add_entry,
    get_entry,
    get_regional_goal,
    hard_delete_entry,
    list_branches,
    list_entries,
    restore_entry,
    seed_branches,
    soft_delete_entry,
    update_branch_goal,
)
from branchgoals.store.schema import database_exists, get_db_path, init_database

__all__ = [
    # Schema
    "database_exists",
    "get_db_path",
    "init_database",
    # Queries
    "add_entry",
    "get_entry",
    "get_regional_goal",
    "hard_delete_entry",
    "list_branches",
    "list_entries",
    "restore_entry",
    "seed_branches",
    "soft_delete_entry",
    "update_branch_goal",
]
