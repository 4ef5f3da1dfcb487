"""
backend/permissions.py

Role-Based Access Control (RBAC) for the ERP modules.

A permission is the string "<module>:<action>". Each role maps to a fixed
set of permissions; unknown roles get nothing.

Pure Python logic - no FastAPI imports, no database access.
"""

from typing import Dict, List, Set


# ============================================================================
# Role and Module Definitions
# ============================================================================

class Role:
    """Role constants for RBAC."""
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MANAGER = "manager"
    ACCOUNTANT = "accountant"
    RESERVATION = "reservation"


ROLES = (
    Role.SUPER_ADMIN,
    Role.ADMIN,
    Role.MANAGER,
    Role.ACCOUNTANT,
    Role.RESERVATION,
)

MODULES = (
    "dashboard",
    "transactions",
    "customers",
    "agents",
    "ledger",
    "reports",
    "audit",
    "settings",
)

ACTIONS = ("view", "create", "edit", "delete", "approve", "export")


def _grant(modules, actions) -> Set[str]:
    return {f"{module}:{action}" for module in modules for action in actions}


ALL_PERMISSIONS: Set[str] = _grant(MODULES, ACTIONS)


# ============================================================================
# Role to Permissions Mapping
# ============================================================================

ROLE_PERMISSIONS: Dict[str, Set[str]] = {
    Role.SUPER_ADMIN: set(ALL_PERMISSIONS),
    Role.ADMIN: set(ALL_PERMISSIONS),
    # Manager runs the business but cannot touch settings or the audit trail
    Role.MANAGER: _grant([m for m in MODULES if m not in ("settings", "audit")], ACTIONS),
    Role.ACCOUNTANT: (
        {"dashboard:view", "ledger:view"}
        | _grant(["transactions"], ["view", "create", "edit"])
        | _grant(["reports"], ["view", "export"])
    ),
    Role.RESERVATION: (
        {"dashboard:view", "agents:view"}
        | _grant(["customers"], ["view", "create", "edit"])
    ),
}


# ============================================================================
# Permission Checks
# ============================================================================

def role_permissions(role: str) -> Set[str]:
    """
    Return the permission set for a role.

    Args:
        role: Role name (case-insensitive)

    Returns:
        Set of "module:action" strings, empty for unknown roles.
    """
    role_lower = role.lower() if role else ""
    return set(ROLE_PERMISSIONS.get(role_lower, set()))


def has_permission(role: str, module: str, action: str) -> bool:
    """Check whether a role may perform action on module."""
    return f"{module}:{action}" in role_permissions(role)


def permissions_by_module(role: str) -> Dict[str, List[str]]:
    """
    Group a role's permissions by module for the frontend.

    Example: {"dashboard": ["view"], "customers": ["view", "create", "edit"]}
    """
    granted = role_permissions(role)
    grouped: Dict[str, List[str]] = {}
    for module in MODULES:
        actions = [a for a in ACTIONS if f"{module}:{a}" in granted]
        if actions:
            grouped[module] = actions
    return grouped
