"""
Permission reconciliation.

Brings a user's ledger back in line with their role: missing baseline
permissions are granted (or un-revoked) and, when asked to, permissions beyond
the baseline are revoked. The batch variant isolates every user so one failure
never aborts the rest.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from prompt_access.config import settings
from prompt_access.config.permissions_config import get_role_permissions, sort_permissions
from prompt_access.core.authorization import require_authorized
from prompt_access.core.protocols import PermissionLedgerStore, UserStore
from prompt_access.modules.permissions.resolver import PermissionResolver
from prompt_access.modules.permissions.schemas import (
    AuthorizedActor,
    BatchSyncResult,
    PermissionAudit,
    SyncResult,
    UserSyncOutcome,
)
from prompt_access.modules.users.schemas import UserSummary

logger = logging.getLogger(__name__)


class PermissionSyncService:
    def __init__(
        self,
        users: UserStore,
        ledger: PermissionLedgerStore,
        resolver: Optional[PermissionResolver] = None,
        max_workers: Optional[int] = None
    ):
        self.users = users
        self.ledger = ledger
        self.resolver = resolver or PermissionResolver(users, ledger)
        self.max_workers = max(1, max_workers or settings.sync_max_workers)

    def sync_user_with_role(self, actor: AuthorizedActor, user_id: str, remove_extra: bool = False) -> SyncResult:
        require_authorized(actor, "sync permissions")
        return self._sync_user(user_id, remove_extra)

    def _sync_user(self, user_id: str, remove_extra: bool) -> SyncResult:
        view = self.resolver.compute_effective_permissions(user_id)
        expected = get_role_permissions(view.role)
        effective = set(view.all_permissions)

        missing = list(sort_permissions(expected - effective))
        extra = list(sort_permissions(effective - expected)) if remove_extra else []

        logger.debug(
            f"Sync user {user_id}: role={view.role}, missing={[p.value for p in missing]}, "
            f"extra={[p.value for p in extra]}"
        )

        result = SyncResult(user_id=user_id, role=view.role)
        if missing:
            try:
                self.ledger.upsert_overrides(user_id, missing, is_revoked=False)
                result.granted = missing
            except Exception as e:
                logger.error(f"Failed to grant permissions to user {user_id}: {e}")
                result.errors.append(f"Failed to grant permissions: {e}")
        if extra:
            try:
                self.ledger.upsert_overrides(user_id, extra, is_revoked=True)
                result.revoked = extra
            except Exception as e:
                logger.error(f"Failed to revoke permissions from user {user_id}: {e}")
                result.errors.append(f"Failed to revoke permissions: {e}")

        result.success = not result.errors
        role_name = view.role.value if view.role else "unknown"
        result.message = f"Synchronized permissions for {role_name} role"
        return result

    def _sync_outcome(self, user: UserSummary, remove_extra: bool) -> UserSyncOutcome:
        try:
            result = self._sync_user(user.id, remove_extra)
        except Exception as e:
            logger.error(f"Permission sync failed for user {user.id}: {e}")
            return UserSyncOutcome(user_id=user.id, email=user.email, role=user.role, success=False, error=str(e))
        return UserSyncOutcome(
            user_id=user.id,
            email=user.email,
            role=result.role,
            success=result.success,
            result=result,
            error="; ".join(result.errors) or None,
        )

    def sync_all_users(self, actor: AuthorizedActor, remove_extra: bool = False) -> BatchSyncResult:
        """Reconcile every user on a bounded worker pool; per-user failures are reported, not raised"""
        require_authorized(actor, "sync all permissions")
        users = self.users.list_all_users()

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="permission-sync") as pool:
            outcomes = list(pool.map(lambda user: self._sync_outcome(user, remove_extra), users))

        failed = sum(1 for o in outcomes if not o.success)
        logger.info(
            f"Permission sync by {actor.actor_id}: {len(outcomes) - failed} succeeded, "
            f"{failed} failed (remove_extra={remove_extra})"
        )
        return BatchSyncResult(
            results=outcomes,
            succeeded=len(outcomes) - failed,
            failed=failed,
            message=f"Synchronized permissions for {len(users)} users",
        )

    def audit_user(self, user_id: str, email: Optional[str] = None) -> PermissionAudit:
        """Read-only comparison of effective permissions with the role baseline"""
        view = self.resolver.compute_effective_permissions(user_id)
        expected = get_role_permissions(view.role)
        effective = set(view.all_permissions)
        missing = list(sort_permissions(expected - effective))
        extra = list(sort_permissions(effective - expected))
        return PermissionAudit(
            user_id=user_id,
            email=email,
            role=view.role,
            all_permissions=list(view.all_permissions),
            role_permissions=list(view.role_permissions),
            individual_permissions=list(view.individual_permissions),
            revoked_permissions=list(view.revoked_permissions),
            missing_permissions=missing,
            extra_permissions=extra,
            in_sync=not missing and not extra,
        )

    def audit_all_users(self) -> List[PermissionAudit]:
        audits = []
        for user in self.users.list_all_users():
            try:
                audits.append(self.audit_user(user.id, email=user.email))
            except Exception as e:
                logger.error(f"Permission audit failed for user {user.id}: {e}")
                audits.append(PermissionAudit(
                    user_id=user.id, email=user.email, role=user.role, in_sync=False, error=str(e)
                ))
        return audits
