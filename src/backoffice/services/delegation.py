"""Who may hand out which role, and which scopes each role may live at."""

from collections.abc import Iterable, Mapping
from typing import Final

from src.backoffice.core.exceptions import Forbidden, InvalidScope
from src.backoffice.models import RoleLevel, Scope

DELEGATION_TABLE: Final[Mapping[RoleLevel, frozenset[RoleLevel]]] = {
    RoleLevel.SUPERADMIN: frozenset({RoleLevel.OWNER}),
    RoleLevel.OWNER: frozenset({RoleLevel.MANAGER, RoleLevel.CASHIER}),
    RoleLevel.MANAGER: frozenset({RoleLevel.CASHIER}),
    RoleLevel.CASHIER: frozenset(),
}


def can_delegate(creator_role: RoleLevel, target_role: RoleLevel) -> bool:
    return target_role in DELEGATION_TABLE.get(creator_role, frozenset())


def delegators_of(target_role: RoleLevel) -> frozenset[RoleLevel]:
    """Roles allowed to hand out ``target_role``."""
    return frozenset(role for role, targets in DELEGATION_TABLE.items() if target_role in targets)


def ensure_can_delegate(creator_roles: Iterable[RoleLevel], target_role: RoleLevel) -> None:
    """Raise Forbidden unless one of ``creator_roles`` may hand out ``target_role``."""
    if not any(can_delegate(role, target_role) for role in creator_roles):
        raise Forbidden(f"Not allowed to grant the {target_role.value} role")


def validate_scope_for_role(role: RoleLevel, scope: Scope) -> None:
    """Check a scope has the shape the role requires.

    SUPERADMIN is scope-free, OWNER is a whole shop, MANAGER and CASHIER sit
    at a shop, a warehouse or both.

    Raises:
        InvalidScope: If the shape does not fit the role.
    """
    if role is RoleLevel.SUPERADMIN:
        if not scope.is_global:
            raise InvalidScope("The superadmin role cannot be limited to a shop or warehouse")
    elif role is RoleLevel.OWNER:
        if scope.shop_id is None or scope.warehouse_id is not None:
            raise InvalidScope("The owner role requires a shop and no warehouse")
    elif scope.is_global:
        raise InvalidScope(f"The {role.value} role requires a shop or a warehouse")
