"""Store interfaces consumed by the permission resolver and services."""

from typing import Iterable, List, Optional, Protocol, Sequence

from prompt_access.config.permissions_config import Permission, Role
from prompt_access.modules.permissions.schemas import PermissionOverride
from prompt_access.modules.users.schemas import UserRecord, UserSummary


class UserStore(Protocol):
    def get_user_role(self, user_id: str) -> Optional[Role]:
        """Raises NotFoundError when the user does not exist."""
        ...

    def get_user_record(self, user_id: str) -> UserRecord:
        ...

    def list_all_users(self) -> List[UserSummary]:
        ...


class PermissionLedgerStore(Protocol):
    def list_overrides(self, user_id: str) -> List[PermissionOverride]:
        ...

    def get_override(self, user_id: str, permission: Permission) -> Optional[PermissionOverride]:
        ...

    def count_overrides(self, user_id: str) -> int:
        ...

    def upsert_override(self, user_id: str, permission: Permission, is_revoked: bool) -> PermissionOverride:
        ...

    def upsert_overrides(self, user_id: str, permissions: Iterable[Permission], is_revoked: bool) -> List[PermissionOverride]:
        ...

    def delete_override(self, user_id: str, permission: Permission) -> bool:
        ...

    def delete_all_overrides(self, user_id: str) -> int:
        ...

    def bulk_insert_overrides(self, rows: Sequence[PermissionOverride], skip_duplicates: bool = True) -> int:
        ...

    def apply_role_transition(self, user_id: str, role: Role, permissions: Sequence[Permission]) -> None:
        """Set role, clear every override and seed the baseline in one transaction."""
        ...
