import logging
from typing import List, Optional

from prompt_access.config.permissions_config import Permission, Role, get_role_permissions, sort_permissions
from prompt_access.core.authorization import require_authorized
from prompt_access.core.protocols import PermissionLedgerStore, UserStore
from prompt_access.modules.permissions.resolver import PermissionResolver
from prompt_access.modules.permissions.schemas import (
    AuthorizedActor,
    BulkGrantResult,
    InitializationResult,
    OverrideChangeResult,
    PermissionOverride,
    RoleTransitionResult,
)
from prompt_access.modules.users.schemas import UserWithPermissionsResponse

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(self, users: UserStore, ledger: PermissionLedgerStore, resolver: Optional[PermissionResolver] = None):
        self.users = users
        self.ledger = ledger
        self.resolver = resolver or PermissionResolver(users, ledger)

    def grant_permission(self, actor: AuthorizedActor, user_id: str, permission: Permission) -> OverrideChangeResult:
        """Grant a permission individually, or un-revoke it. Already granted is a no-op."""
        require_authorized(actor, "grant permissions")
        permission = Permission(permission)
        self.users.get_user_record(user_id)

        existing = self.ledger.get_override(user_id, permission)
        if existing is not None and not existing.is_revoked:
            return OverrideChangeResult(
                user_id=user_id,
                permission=permission,
                is_revoked=False,
                changed=False,
                reason="already_granted",
                message=f"User already has permission {permission.value}",
            )

        self.ledger.upsert_override(user_id, permission, is_revoked=False)
        logger.info(f"{actor.actor_id} granted {permission.value} to user {user_id}")
        return OverrideChangeResult(
            user_id=user_id,
            permission=permission,
            is_revoked=False,
            changed=True,
            message=f"Granted permission {permission.value}",
        )

    def grant_permissions(self, actor: AuthorizedActor, user_id: str, permissions: List[Permission]) -> BulkGrantResult:
        """Grant (or un-revoke) several permissions in one atomic write"""
        require_authorized(actor, "grant permissions")
        self.users.get_user_record(user_id)

        ordered = list(sort_permissions(Permission(p) for p in permissions))
        self.ledger.upsert_overrides(user_id, ordered, is_revoked=False)
        logger.info(f"{actor.actor_id} granted {len(ordered)} permissions to user {user_id}")
        return BulkGrantResult(
            user_id=user_id,
            granted=ordered,
            message=f"Granted {len(ordered)} permissions",
        )

    def revoke_permission(self, actor: AuthorizedActor, user_id: str, permission: Permission) -> OverrideChangeResult:
        """Revoke any permission, role-based or individual. Already revoked is a no-op."""
        require_authorized(actor, "revoke permissions")
        permission = Permission(permission)
        self.users.get_user_record(user_id)

        existing = self.ledger.get_override(user_id, permission)
        if existing is not None and existing.is_revoked:
            return OverrideChangeResult(
                user_id=user_id,
                permission=permission,
                is_revoked=True,
                changed=False,
                reason="already_revoked",
                message=f"Permission {permission.value} is already revoked",
            )

        self.ledger.upsert_override(user_id, permission, is_revoked=True)
        logger.info(f"{actor.actor_id} revoked {permission.value} from user {user_id}")
        return OverrideChangeResult(
            user_id=user_id,
            permission=permission,
            is_revoked=True,
            changed=True,
            message=f"Successfully revoked permission {permission.value} from user",
        )

    def clear_override(self, actor: AuthorizedActor, user_id: str, permission: Permission) -> OverrideChangeResult:
        """Delete the override row so the permission falls back to the role baseline"""
        require_authorized(actor, "remove permission overrides")
        permission = Permission(permission)
        self.users.get_user_record(user_id)

        removed = self.ledger.delete_override(user_id, permission)
        if removed:
            logger.info(f"{actor.actor_id} cleared override {permission.value} for user {user_id}")
        return OverrideChangeResult(
            user_id=user_id,
            permission=permission,
            is_revoked=False,
            changed=removed,
            reason=None if removed else "no_override",
            message="Override removed" if removed else "No override to remove",
        )

    def transition_role(self, actor: AuthorizedActor, user_id: str, new_role: Role) -> RoleTransitionResult:
        """
        Move a user to a new role and reset their ledger to that role's baseline.
        Role update, override deletion and baseline seeding commit together, so
        no grant or revocation from the previous role survives.
        """
        require_authorized(actor, "change user roles")
        new_role = Role(new_role)
        previous_role = self.users.get_user_record(user_id).role

        baseline = list(sort_permissions(get_role_permissions(new_role)))
        self.ledger.apply_role_transition(user_id, new_role, baseline)

        logger.info(
            f"Synced permissions for user {user_id}: removed old, granted {len(baseline)} "
            f"new permissions for role {new_role.value}"
        )
        return RoleTransitionResult(
            user_id=user_id,
            previous_role=previous_role,
            new_role=new_role,
            permissions_granted=baseline,
            message=f"User role updated to {new_role.value}",
        )

    def has_initialized_permissions(self, user_id: str) -> bool:
        """True once any override row exists; a first-touch signal, not an effective-permission check"""
        return self.ledger.count_overrides(user_id) > 0

    def initialize_user_permissions(self, user_id: str, role: Optional[Role]) -> InitializationResult:
        """Seed baseline rows for the role; rows that already exist are left alone"""
        baseline = list(sort_permissions(get_role_permissions(role)))
        inserted = self.ledger.bulk_insert_overrides(
            [PermissionOverride(user_id=user_id, permission=p) for p in baseline],
            skip_duplicates=True,
        )
        logger.info(
            f"Initialized {len(baseline)} permissions for user {user_id} "
            f"with role {role.value if role else None} ({inserted} new rows)"
        )
        return InitializationResult(
            user_id=user_id,
            role=role,
            permissions_granted=baseline,
            inserted_count=inserted,
        )

    def ensure_user_initialized(self, user_id: str) -> Optional[InitializationResult]:
        """First-login gate: seed the ledger from the stored role when it has no rows yet"""
        if self.has_initialized_permissions(user_id):
            return None
        role = self.users.get_user_role(user_id)
        return self.initialize_user_permissions(user_id, role)

    def get_user_with_permissions(self, user_id: str) -> UserWithPermissionsResponse:
        """User record plus the role baseline permissions"""
        user = self.users.get_user_record(user_id)
        return UserWithPermissionsResponse(
            **user.model_dump(),
            permissions=list(sort_permissions(get_role_permissions(user.role))),
        )
