"""Role resolution and permissions.

PINs are compared against a static table. The comparison sits behind the
PinAuthenticator protocol so another credential source can replace it.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from branchgoals.domain.models import BranchId, Entry

PUBLIC = "public"
LEADER = "leader"
ADMIN = "admin"

ROLES = (PUBLIC, LEADER, ADMIN)


@dataclass(frozen=True)
class AccessContext:
    """Resolved caller role; leaders are bound to one branch."""

    role: str
    branch_id: BranchId | None = None


class PinAuthenticator(Protocol):
    def resolve(self, pin: str) -> AccessContext | None: ...


@dataclass(frozen=True)
class StaticPinTable:
    """Shared PINs for admin, public and each branch leader."""

    admin_pin: str
    public_pin: str
    branch_pins: Mapping[str, str] = field(default_factory=dict)

    def resolve(self, pin: str) -> AccessContext | None:
        """Resolve a PIN to an access context.

        Args:
            pin: PIN typed by the user (surrounding whitespace ignored).

        Returns:
            AccessContext, or None if the PIN is empty or unknown.
        """
        pin = pin.strip()
        if not pin:
            return None

        if pin == self.admin_pin:
            return AccessContext(role=ADMIN)

        for branch_id, branch_pin in self.branch_pins.items():
            if pin == branch_pin:
                return AccessContext(role=LEADER, branch_id=BranchId(branch_id))

        if pin == self.public_pin:
            return AccessContext(role=PUBLIC)

        return None


def can_manage(access: AccessContext) -> bool:
    """Goals, deletes, restores and purges are admin only."""
    return access.role == ADMIN


def visible_entries(entries: list[Entry], access: AccessContext) -> list[Entry]:
    """Non-deleted entries a caller may list.

    Admins see every entry, leaders see entries with an allocation to their
    branch, the public sees none.
    """
    if access.role == ADMIN:
        return [e for e in entries if not e.is_deleted]

    if access.role == LEADER and access.branch_id:
        return [
            e for e in entries if not e.is_deleted and any(a.branch_id == access.branch_id for a in e.allocations)
        ]

    return []
