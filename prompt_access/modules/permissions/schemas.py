from pydantic import BaseModel, Field
from typing import Optional, List, Tuple
from datetime import datetime

from prompt_access.config.permissions_config import Role, Permission


class AuthorizedActor(BaseModel):
    """Evidence that the caller was authorized upstream for a mutating operation."""
    actor_id: str
    authorized: bool = False

    class Config:
        frozen = True


class PermissionOverride(BaseModel):
    user_id: str
    permission: Permission
    is_revoked: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EffectivePermissions(BaseModel):
    user_id: str
    role: Optional[Role] = None
    role_permissions: Tuple[Permission, ...] = ()
    individual_permissions: Tuple[Permission, ...] = ()
    revoked_permissions: Tuple[Permission, ...] = ()
    all_permissions: Tuple[Permission, ...] = ()

    class Config:
        frozen = True


class PermissionCheckResponse(BaseModel):
    user_id: str
    permission: Permission
    allowed: bool


class PermissionCatalogEntry(BaseModel):
    name: str
    description: str


class RoleCatalogEntry(BaseModel):
    name: str
    permissions: List[str]


class PermissionCatalogResponse(BaseModel):
    permissions: List[PermissionCatalogEntry]
    roles: List[RoleCatalogEntry]


class GrantRequest(BaseModel):
    permissions: List[Permission] = Field(min_length=1)


class RevokeRequest(BaseModel):
    permission: Permission


class OverrideChangeResult(BaseModel):
    user_id: str
    permission: Permission
    is_revoked: bool
    changed: bool
    reason: Optional[str] = None  # set when changed is False
    message: str


class BulkGrantResult(BaseModel):
    user_id: str
    granted: List[Permission]
    message: str


class RoleTransitionResult(BaseModel):
    user_id: str
    previous_role: Optional[Role] = None
    new_role: Role
    permissions_granted: List[Permission]
    message: str


class InitializationResult(BaseModel):
    user_id: str
    role: Optional[Role] = None
    permissions_granted: List[Permission]
    inserted_count: int


class SyncRequest(BaseModel):
    remove_extra: Optional[bool] = None  # falls back to settings.sync_remove_extra_default


class SyncResult(BaseModel):
    user_id: str
    role: Optional[Role] = None
    granted: List[Permission] = []
    revoked: List[Permission] = []
    errors: List[str] = []
    success: bool = True
    message: str = ""


class UserSyncOutcome(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Optional[Role] = None
    success: bool
    result: Optional[SyncResult] = None
    error: Optional[str] = None


class BatchSyncResult(BaseModel):
    results: List[UserSyncOutcome]
    succeeded: int
    failed: int
    message: str


class PermissionAudit(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Optional[Role] = None
    all_permissions: List[Permission] = []
    role_permissions: List[Permission] = []
    individual_permissions: List[Permission] = []
    revoked_permissions: List[Permission] = []
    missing_permissions: List[Permission] = []
    extra_permissions: List[Permission] = []
    in_sync: bool = True
    error: Optional[str] = None
