"""
Grant ledger accessor for the user_permissions table.

All writes are upserts keyed on (user_id, permission), so a row is created on
first touch and toggled in place afterwards. Store errors surface as
StoreFailure.
"""

import logging
from datetime import datetime, timezone
from supabase import Client
from prompt_access.config import settings
from prompt_access.config.permissions_config import Permission, Role, parse_permission
from prompt_access.database.supabase_client import execute_query
from prompt_access.modules.permissions.schemas import PermissionOverride
from typing import Iterable, List, Optional, Sequence

logger = logging.getLogger(__name__)

ON_CONFLICT = "user_id,permission"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_override(row: dict) -> Optional[PermissionOverride]:
    permission = parse_permission(row.get("permission"))
    if permission is None:
        logger.warning(f"Ignoring unknown permission {row.get('permission')!r} for user {row.get('user_id')}")
        return None
    return PermissionOverride(
        user_id=row["user_id"],
        permission=permission,
        is_revoked=bool(row.get("is_revoked")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class PermissionLedger:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.table = settings.user_permissions_table

    def list_overrides(self, user_id: str) -> List[PermissionOverride]:
        """All override rows for a user"""
        result = execute_query(
            self.supabase.table(self.table)
                .select("user_id, permission, is_revoked, created_at, updated_at")
                .eq("user_id", user_id),
            "list permission overrides"
        )
        overrides = [_to_override(row) for row in result.data or []]
        return [o for o in overrides if o is not None]

    def get_override(self, user_id: str, permission: Permission) -> Optional[PermissionOverride]:
        result = execute_query(
            self.supabase.table(self.table)
                .select("user_id, permission, is_revoked, created_at, updated_at")
                .eq("user_id", user_id)
                .eq("permission", Permission(permission).value)
                .limit(1),
            "load permission override"
        )
        if not result.data:
            return None
        return _to_override(result.data[0])

    def count_overrides(self, user_id: str) -> int:
        result = execute_query(
            self.supabase.table(self.table)
                .select("id", count="exact")
                .eq("user_id", user_id)
                .limit(1),
            "count permission overrides"
        )
        return result.count or 0

    def upsert_override(self, user_id: str, permission: Permission, is_revoked: bool) -> PermissionOverride:
        """Create or toggle a single override row"""
        rows = self.upsert_overrides(user_id, [permission], is_revoked)
        if rows:
            return rows[0]
        return PermissionOverride(user_id=user_id, permission=permission, is_revoked=is_revoked)

    def upsert_overrides(
        self,
        user_id: str,
        permissions: Iterable[Permission],
        is_revoked: bool
    ) -> List[PermissionOverride]:
        """Write every permission in one statement, so the batch commits atomically"""
        now = _now()
        payload = [
            {
                "user_id": user_id,
                "permission": Permission(permission).value,
                "is_revoked": is_revoked,
                "updated_at": now,
            }
            for permission in dict.fromkeys(permissions)
        ]
        if not payload:
            return []
        result = execute_query(
            self.supabase.table(self.table).upsert(payload, on_conflict=ON_CONFLICT),
            "write permission overrides"
        )
        logger.debug(f"Upserted {len(payload)} overrides for user {user_id} (is_revoked={is_revoked})")
        overrides = [_to_override(row) for row in result.data or []]
        return [o for o in overrides if o is not None]

    def delete_override(self, user_id: str, permission: Permission) -> bool:
        """Remove an override so the permission defers to the role baseline"""
        result = execute_query(
            self.supabase.table(self.table)
                .delete()
                .eq("user_id", user_id)
                .eq("permission", Permission(permission).value),
            "delete permission override"
        )
        return bool(result.data)

    def delete_all_overrides(self, user_id: str) -> int:
        result = execute_query(
            self.supabase.table(self.table)
                .delete()
                .eq("user_id", user_id),
            "delete permission overrides"
        )
        return len(result.data or [])

    def bulk_insert_overrides(self, rows: Sequence[PermissionOverride], skip_duplicates: bool = True) -> int:
        """Insert rows; with skip_duplicates existing (user_id, permission) rows are left untouched.
        Returns the number of rows actually inserted."""
        payload = [
            {
                "user_id": row.user_id,
                "permission": row.permission.value,
                "is_revoked": row.is_revoked,
            }
            for row in rows
        ]
        if not payload:
            return 0
        table = self.supabase.table(self.table)
        if skip_duplicates:
            query = table.upsert(payload, on_conflict=ON_CONFLICT, ignore_duplicates=True)
        else:
            query = table.insert(payload)
        result = execute_query(query, "insert permission overrides")
        return len(result.data or [])

    def apply_role_transition(self, user_id: str, role: Role, permissions: Sequence[Permission]) -> None:
        """Set the role, clear every override and seed the new baseline in one transaction"""
        execute_query(
            self.supabase.rpc(settings.role_transition_rpc, {
                "p_user_id": user_id,
                "p_role": Role(role).value,
                "p_permissions": [Permission(p).value for p in permissions],
            }),
            "apply role transition"
        )
