"""Role permissions and branch scoping for callers.

Roles map to a fixed resource/action table. Branch scoping is a separate
predicate: admins reach every branch, everyone else only the branches listed
in their caller context.
"""

from collections.abc import Callable, Iterable
from enum import Enum
from typing import TypeVar
from uuid import UUID

T = TypeVar("T")


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    SALES = "sales"
    FARMER = "farmer"


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


ALL_ACTIONS = frozenset(a.value for a in Action)

ROLE_PERMISSIONS: dict[str, dict[str, frozenset[str]]] = {
    Role.ADMIN.value: {
        "branches": ALL_ACTIONS,
        "farmers": ALL_ACTIONS,
        "products": ALL_ACTIONS,
        "settlements": ALL_ACTIONS,
        "audit_logs": frozenset({"view"}),
    },
    Role.MANAGER.value: {
        "branches": frozenset({"view"}),
        "farmers": frozenset({"view", "create", "edit"}),
        "products": frozenset({"view", "create", "edit"}),
        "settlements": frozenset({"view", "create", "edit"}),
        "audit_logs": frozenset({"view"}),
    },
    Role.SALES.value: {
        "branches": frozenset({"view"}),
        "farmers": frozenset({"view"}),
        "products": frozenset({"view"}),
    },
    # Farmers only ever see their own records; see CallerContext.can_view_farmer
    Role.FARMER.value: {
        "farmers": frozenset({"view"}),
        "products": frozenset({"view"}),
        "settlements": frozenset({"view"}),
    },
}


def has_permission(role: str, resource: str, action: str) -> bool:
    """Return True if ``role`` may perform ``action`` on ``resource``."""
    permissions = ROLE_PERMISSIONS.get(role)
    if permissions is None:
        return False
    return action in permissions.get(resource, frozenset())


def can_access(role: str, scope_ids: Iterable[UUID], target_id: UUID | None) -> bool:
    """Decide whether a caller scoped to ``scope_ids`` may reach ``target_id``.

    Admins reach everything. For other roles an unassigned target is out of
    scope.
    """
    if role == Role.ADMIN.value:
        return True
    if target_id is None:
        return False
    return target_id in set(scope_ids)


def filter_by_scope(
    role: str,
    scope_ids: Iterable[UUID],
    rows: Iterable[T],
    key: Callable[[T], UUID | None],
) -> list[T]:
    """Keep only the rows whose scope key the caller can access."""
    scope = set(scope_ids)
    return [row for row in rows if can_access(role, scope, key(row))]
