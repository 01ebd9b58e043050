import logging
from supabase import Client
from prompt_access.config import settings
from prompt_access.config.permissions_config import Role, parse_role
from prompt_access.core.exceptions import NotFoundError
from prompt_access.database.supabase_client import execute_query
from prompt_access.modules.users.schemas import UserRecord, UserSummary, UserStatsResponse
from typing import List, Optional

logger = logging.getLogger(__name__)

_PAGE_SIZE = 1000  # PostgREST default max-rows


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.table = settings.users_table

    def get_user_record(self, user_id: str) -> UserRecord:
        """Get user record by ID"""
        result = execute_query(
            self.supabase.table(self.table)
                .select("*")
                .eq("id", user_id)
                .limit(1),
            "load user"
        )
        if not result.data:
            raise NotFoundError("User not found", details={"user_id": user_id})
        return UserRecord(**result.data[0])

    def get_user_role(self, user_id: str) -> Optional[Role]:
        """Get the stored role for a user. None means the stored value is not a known role."""
        result = execute_query(
            self.supabase.table(self.table)
                .select("id, role")
                .eq("id", user_id)
                .limit(1),
            "load user role"
        )
        if not result.data:
            raise NotFoundError("User not found", details={"user_id": user_id})
        return parse_role(result.data[0].get("role"))

    def list_all_users(self) -> List[UserSummary]:
        """Every user, oldest first, fetched page by page.

        Ordered by (created_at, id) so page boundaries are stable when timestamps tie.
        """
        users = []
        start = 0
        while True:
            result = execute_query(
                self.supabase.table(self.table)
                    .select("id, email, role")
                    .order("created_at")
                    .order("id")
                    .range(start, start + _PAGE_SIZE - 1),
                "list users"
            )
            page = result.data or []
            users.extend(UserSummary(**row) for row in page)
            if len(page) < _PAGE_SIZE:
                return users
            start += _PAGE_SIZE

    def list_users(self, limit: int = 10, offset: int = 0) -> List[UserRecord]:
        result = execute_query(
            self.supabase.table(self.table)
                .select("*")
                .order("created_at", desc=True)
                .limit(limit)
                .offset(offset),
            "list users"
        )
        return [UserRecord(**user) for user in result.data or []]

    def get_user_stats(self) -> UserStatsResponse:
        total = execute_query(
            self.supabase.table(self.table).select("id", count="exact").limit(1),
            "count users"
        )
        admins = execute_query(
            self.supabase.table(self.table)
                .select("id", count="exact")
                .in_("role", [Role.OWNER.value, Role.ADMIN.value])
                .limit(1),
            "count admin users"
        )
        return UserStatsResponse(total_users=total.count or 0, admin_users=admins.count or 0)

    def delete_user(self, user_id: str) -> bool:
        """Delete user record and its permission ledger"""
        self.get_user_record(user_id)

        # Remove ledger rows first
        execute_query(
            self.supabase.table(settings.user_permissions_table)
                .delete()
                .eq("user_id", user_id),
            "delete user permissions"
        )
        result = execute_query(
            self.supabase.table(self.table)
                .delete()
                .eq("id", user_id),
            "delete user"
        )
        logger.info(f"Deleted user {user_id}")
        return bool(result.data)
