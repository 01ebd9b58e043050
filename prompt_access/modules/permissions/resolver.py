"""
Permission resolver.

Combines the role baseline with the user's override ledger. Revocation always
wins, then an explicit grant, then the role baseline. Role and overrides are
re-read from the store on every call.
"""

import logging
from typing import Iterable, Optional, Sequence

from prompt_access.config.permissions_config import (
    Permission,
    Role,
    PROMPT_MANAGEMENT_PERMISSIONS,
    get_role_permissions,
    sort_permissions,
)
from prompt_access.core.protocols import PermissionLedgerStore, UserStore
from prompt_access.modules.permissions.schemas import EffectivePermissions, PermissionOverride

logger = logging.getLogger(__name__)


def resolve_decision(role: Optional[Role], permission: Permission, override: Optional[PermissionOverride]) -> bool:
    if override is not None and override.is_revoked:
        return False
    if override is not None:
        return True
    if role == Role.OWNER:
        return True
    return permission in get_role_permissions(role)


def build_effective_permissions(
    user_id: str,
    role: Optional[Role],
    overrides: Sequence[PermissionOverride]
) -> EffectivePermissions:
    role_permissions = get_role_permissions(role)
    individual = {o.permission for o in overrides if not o.is_revoked}
    revoked = {o.permission for o in overrides if o.is_revoked}
    return EffectivePermissions(
        user_id=user_id,
        role=role,
        role_permissions=sort_permissions(role_permissions),
        individual_permissions=sort_permissions(individual),
        revoked_permissions=sort_permissions(revoked),
        all_permissions=sort_permissions((role_permissions | individual) - revoked),
    )


class PermissionResolver:
    def __init__(self, users: UserStore, ledger: PermissionLedgerStore):
        self.users = users
        self.ledger = ledger

    def compute_effective_permissions(self, user_id: str) -> EffectivePermissions:
        """Role baseline plus individual grants minus revocations. Raises NotFoundError / StoreFailure."""
        role = self.users.get_user_role(user_id)
        overrides = self.ledger.list_overrides(user_id)
        return build_effective_permissions(user_id, role, overrides)

    def has_permission(self, user_id: str, permission: Permission) -> bool:
        """Fail-closed decision: any error denies."""
        try:
            permission = Permission(permission)
            role = self.users.get_user_role(user_id)
            override = self.ledger.get_override(user_id, permission)
            return resolve_decision(role, permission, override)
        except Exception as e:
            logger.warning(f"Permission check {permission} for user {user_id} denied on error: {e}")
            return False

    def has_any_permission(self, user_id: str, permissions: Iterable[Permission]) -> bool:
        return any(self.has_permission(user_id, p) for p in permissions)

    def can_manage_users(self, user_id: str) -> bool:
        return self.has_permission(user_id, Permission.MANAGE_USERS)

    def can_manage_prompts(self, user_id: str) -> bool:
        return self.has_any_permission(user_id, PROMPT_MANAGEMENT_PERMISSIONS)

    def can_view_prompts(self, user_id: str) -> bool:
        return self.has_permission(user_id, Permission.VIEW_PROMPTS)
