from fastapi import APIRouter, Depends
from prompt_access.config.permissions_config import Permission
from prompt_access.core.dependencies import (
    get_authorized_actor,
    get_current_user_id,
    get_permission_service,
    get_service_user_store,
    get_user_store,
    require_permission,
)
from prompt_access.core.exceptions import ConflictError
from prompt_access.modules.permissions.schemas import AuthorizedActor, RoleTransitionResult
from prompt_access.modules.permissions.service import PermissionService
from prompt_access.modules.users.schemas import (
    RoleUpdate, UserRecord, UserStatsResponse, UserWithPermissionsResponse
)
from prompt_access.modules.users.service import UserService
from typing import List, Dict

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserRecord])
async def list_users(
    limit: int = 10,
    offset: int = 0,
    user_data: Dict = Depends(require_permission(Permission.MANAGE_USERS)),
    service: UserService = Depends(get_user_store)
):
    return service.list_users(limit=limit, offset=offset)


@router.get("/stats", response_model=UserStatsResponse)
async def get_user_stats(
    user_data: Dict = Depends(require_permission(Permission.MANAGE_USERS)),
    service: UserService = Depends(get_user_store)
):
    return service.get_user_stats()


@router.get("/me", response_model=UserWithPermissionsResponse)
async def get_me(
    user_data: Dict = Depends(get_current_user_id),
    service: PermissionService = Depends(get_permission_service)
):
    """Current user with role permissions; seeds their permission ledger on first visit"""
    service.ensure_user_initialized(user_data["id"])
    return service.get_user_with_permissions(user_data["id"])


@router.get("/{user_id}", response_model=UserWithPermissionsResponse)
async def get_user(
    user_id: str,
    user_data: Dict = Depends(require_permission(Permission.MANAGE_USERS)),
    service: PermissionService = Depends(get_permission_service)
):
    return service.get_user_with_permissions(user_id)


@router.put("/{user_id}/role", response_model=RoleTransitionResult)
async def update_user_role(
    user_id: str,
    body: RoleUpdate,
    actor: AuthorizedActor = Depends(get_authorized_actor),
    service: PermissionService = Depends(get_permission_service)
):
    """Change role and reset the user's permissions to the new role's baseline"""
    return service.transition_role(actor, user_id, body.role)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    actor: AuthorizedActor = Depends(get_authorized_actor),
    service: UserService = Depends(get_service_user_store)
):
    if actor.actor_id == user_id:
        raise ConflictError("Cannot delete your own account", details={"user_id": user_id})
    service.delete_user(user_id)
    return None
