from fastapi import APIRouter, Depends
from prompt_access.config import settings
from prompt_access.config.permissions_config import Permission, get_permission_matrix
from prompt_access.core.dependencies import (
    get_authorized_actor,
    get_current_user_id,
    get_permission_resolver,
    get_permission_service,
    get_sync_service,
    require_permission,
)
from prompt_access.modules.permissions.resolver import PermissionResolver
from prompt_access.modules.permissions.schemas import (
    AuthorizedActor,
    BatchSyncResult,
    BulkGrantResult,
    EffectivePermissions,
    GrantRequest,
    InitializationResult,
    OverrideChangeResult,
    PermissionAudit,
    PermissionCatalogResponse,
    PermissionCheckResponse,
    RevokeRequest,
    SyncRequest,
    SyncResult,
)
from prompt_access.modules.permissions.service import PermissionService
from prompt_access.modules.permissions.sync import PermissionSyncService
from typing import Dict, List, Optional, Union

router = APIRouter(prefix="/permissions", tags=["permissions"])


def _remove_extra(body: Optional[SyncRequest]) -> bool:
    if body is None or body.remove_extra is None:
        return settings.sync_remove_extra_default
    return body.remove_extra


@router.get("/catalog", response_model=PermissionCatalogResponse)
async def get_catalog(user_data: Dict = Depends(get_current_user_id)):
    """Roles, permissions and each role's baseline"""
    return get_permission_matrix()


@router.get("/me", response_model=EffectivePermissions)
async def get_my_permissions(
    user_data: Dict = Depends(get_current_user_id),
    resolver: PermissionResolver = Depends(get_permission_resolver)
):
    """Effective permissions of the caller (for frontend UI)"""
    return resolver.compute_effective_permissions(user_data["id"])


@router.get("/me/check/{permission}", response_model=PermissionCheckResponse)
async def check_my_permission(
    permission: Permission,
    user_data: Dict = Depends(get_current_user_id),
    resolver: PermissionResolver = Depends(get_permission_resolver)
):
    return PermissionCheckResponse(
        user_id=user_data["id"],
        permission=permission,
        allowed=resolver.has_permission(user_data["id"], permission),
    )


@router.get("/audit", response_model=List[PermissionAudit])
def audit_permissions(
    user_data: Dict = Depends(require_permission(Permission.MANAGE_USERS)),
    service: PermissionSyncService = Depends(get_sync_service)
):
    """Compare every user's effective permissions with their role baseline"""
    return service.audit_all_users()


@router.post("/sync", response_model=BatchSyncResult)
def sync_all_permissions(
    body: Optional[SyncRequest] = None,
    actor: AuthorizedActor = Depends(get_authorized_actor),
    service: PermissionSyncService = Depends(get_sync_service)
):
    """Reconcile every user with their role"""
    return service.sync_all_users(actor, remove_extra=_remove_extra(body))


@router.get("/users/{user_id}", response_model=EffectivePermissions)
async def get_user_permissions(
    user_id: str,
    user_data: Dict = Depends(require_permission(Permission.MANAGE_USERS)),
    resolver: PermissionResolver = Depends(get_permission_resolver)
):
    return resolver.compute_effective_permissions(user_id)


@router.get("/users/{user_id}/check/{permission}", response_model=PermissionCheckResponse)
async def check_user_permission(
    user_id: str,
    permission: Permission,
    user_data: Dict = Depends(require_permission(Permission.MANAGE_USERS)),
    resolver: PermissionResolver = Depends(get_permission_resolver)
):
    return PermissionCheckResponse(
        user_id=user_id,
        permission=permission,
        allowed=resolver.has_permission(user_id, permission),
    )


@router.post("/users/{user_id}/grants", response_model=Union[OverrideChangeResult, BulkGrantResult])
async def grant_permissions(
    user_id: str,
    body: GrantRequest,
    actor: AuthorizedActor = Depends(get_authorized_actor),
    service: PermissionService = Depends(get_permission_service)
):
    """Grant one permission (no-op when already granted) or several in one write"""
    if len(body.permissions) == 1:
        return service.grant_permission(actor, user_id, body.permissions[0])
    return service.grant_permissions(actor, user_id, body.permissions)


@router.post("/users/{user_id}/revocations", response_model=OverrideChangeResult)
async def revoke_permission(
    user_id: str,
    body: RevokeRequest,
    actor: AuthorizedActor = Depends(get_authorized_actor),
    service: PermissionService = Depends(get_permission_service)
):
    return service.revoke_permission(actor, user_id, body.permission)


@router.delete("/users/{user_id}/overrides/{permission}", response_model=OverrideChangeResult)
async def clear_override(
    user_id: str,
    permission: Permission,
    actor: AuthorizedActor = Depends(get_authorized_actor),
    service: PermissionService = Depends(get_permission_service)
):
    """Drop an individual grant or revocation so the role baseline applies"""
    return service.clear_override(actor, user_id, permission)


@router.post("/users/{user_id}/sync", response_model=SyncResult)
async def sync_user_permissions(
    user_id: str,
    body: Optional[SyncRequest] = None,
    actor: AuthorizedActor = Depends(get_authorized_actor),
    service: PermissionSyncService = Depends(get_sync_service)
):
    return service.sync_user_with_role(actor, user_id, remove_extra=_remove_extra(body))


@router.post("/users/{user_id}/initialize", response_model=InitializationResult)
async def initialize_user_permissions(
    user_id: str,
    actor: AuthorizedActor = Depends(get_authorized_actor),
    service: PermissionService = Depends(get_permission_service)
):
    """Seed the user's ledger from their current role (idempotent)"""
    role = service.users.get_user_role(user_id)
    return service.initialize_user_permissions(user_id, role)
