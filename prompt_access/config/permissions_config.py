"""
Roles and Permissions Configuration
This config defines the closed set of roles and permissions and the baseline
permissions each role carries. The Owner baseline is computed from the full
permission set so a new permission is granted to Owners without a table edit.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple


class Role(str, Enum):
    OWNER = "Owner"
    ADMIN = "Admin"
    DEVELOPER = "Developer"


class Permission(str, Enum):
    VIEW_PROMPTS = "VIEW_PROMPTS"
    CREATE_PROMPTS = "CREATE_PROMPTS"
    EDIT_PROMPTS = "EDIT_PROMPTS"
    DELETE_PROMPTS = "DELETE_PROMPTS"
    MANAGE_USERS = "MANAGE_USERS"


PERMISSION_DESCRIPTIONS = {
    Permission.VIEW_PROMPTS: "View prompts and prompt history",
    Permission.CREATE_PROMPTS: "Create prompts",
    Permission.EDIT_PROMPTS: "Edit prompts",
    Permission.DELETE_PROMPTS: "Delete prompts",
    Permission.MANAGE_USERS: "Manage users, roles and individual permissions",
}

# Owner is intentionally absent: its baseline is every Permission
ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.ADMIN: frozenset({Permission.VIEW_PROMPTS}),
    Role.DEVELOPER: frozenset({
        Permission.VIEW_PROMPTS,
        Permission.CREATE_PROMPTS,
        Permission.EDIT_PROMPTS,
        Permission.DELETE_PROMPTS,
    }),
}

PROMPT_MANAGEMENT_PERMISSIONS: Tuple[Permission, ...] = (
    Permission.CREATE_PROMPTS,
    Permission.EDIT_PROMPTS,
    Permission.DELETE_PROMPTS,
)

_PERMISSION_ORDER = {permission: index for index, permission in enumerate(Permission)}


def _check_role_table():
    unhandled = [role.value for role in Role if role != Role.OWNER and role not in ROLE_PERMISSIONS]
    if unhandled:
        raise RuntimeError(f"Roles without a permission baseline: {', '.join(unhandled)}")


_check_role_table()


def parse_role(value) -> Optional[Role]:
    """Map a stored role value to a Role; unknown values map to None, never to Owner."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def parse_permission(value) -> Optional[Permission]:
    if isinstance(value, Permission):
        return value
    try:
        return Permission(value)
    except ValueError:
        return None


def get_role_permissions(role: Optional[Role]) -> FrozenSet[Permission]:
    """Baseline permissions for a role. Owner gets everything, unknown roles get nothing."""
    if role == Role.OWNER:
        return frozenset(Permission)
    if role is None:
        return frozenset()
    return ROLE_PERMISSIONS.get(role, frozenset())


def sort_permissions(permissions: Iterable[Permission]) -> Tuple[Permission, ...]:
    """Deduplicate and order permissions by declaration order."""
    return tuple(sorted(set(permissions), key=_PERMISSION_ORDER.__getitem__))


def get_permission_matrix() -> Dict[str, List[dict]]:
    """
    Returns the role/permission catalog
    Format: {
        "permissions": [{"name": "VIEW_PROMPTS", "description": "..."}, ...],
        "roles": [{"name": "Owner", "permissions": ["VIEW_PROMPTS", ...]}, ...]
    }
    """
    permissions = [
        {"name": permission.value, "description": PERMISSION_DESCRIPTIONS[permission]}
        for permission in Permission
    ]
    roles = [
        {
            "name": role.value,
            "permissions": [p.value for p in sort_permissions(get_role_permissions(role))],
        }
        for role in Role
    ]
    return {
        "permissions": permissions,
        "roles": roles,
    }
