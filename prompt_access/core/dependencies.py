"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from prompt_access.config.permissions_config import Permission
from prompt_access.database.supabase_client import get_service_supabase, get_supabase
from prompt_access.modules.auth.service import AuthService
from prompt_access.modules.permissions.ledger import PermissionLedger
from prompt_access.modules.permissions.resolver import PermissionResolver
from prompt_access.modules.permissions.schemas import AuthorizedActor
from prompt_access.modules.permissions.service import PermissionService
from prompt_access.modules.permissions.sync import PermissionSyncService
from prompt_access.modules.users.service import UserService
from supabase import Client
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

ACCESS_DENIED = "Access denied"


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_user_store(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


def get_permission_ledger(supabase: Client = Depends(get_supabase)) -> PermissionLedger:
    return PermissionLedger(supabase)


def get_permission_resolver(
    users: UserService = Depends(get_user_store),
    ledger: PermissionLedger = Depends(get_permission_ledger)
) -> PermissionResolver:
    return PermissionResolver(users, ledger)


def get_permission_service(
    users: UserService = Depends(get_user_store),
    ledger: PermissionLedger = Depends(get_permission_ledger),
    resolver: PermissionResolver = Depends(get_permission_resolver)
) -> PermissionService:
    return PermissionService(users, ledger, resolver)


def get_service_user_store(supabase: Client = Depends(get_service_supabase)) -> UserService:
    """User store on the service_role client; sees every user under RLS"""
    return UserService(supabase)


def get_service_ledger(supabase: Client = Depends(get_service_supabase)) -> PermissionLedger:
    return PermissionLedger(supabase)


def get_sync_service(
    users: UserService = Depends(get_service_user_store),
    ledger: PermissionLedger = Depends(get_service_ledger)
) -> PermissionSyncService:
    return PermissionSyncService(users, ledger, PermissionResolver(users, ledger))


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def require_permission(required_permission: Permission):
    """Factory function to create permission check dependency"""
    def check_permission(
        user_data: dict = Depends(get_current_user_id),
        resolver: PermissionResolver = Depends(get_permission_resolver)
    ) -> dict:
        """Dependency to check if user has required permission; denials look the same whatever the cause"""
        if not resolver.has_permission(user_data["id"], required_permission):
            logger.info(f"Denied {required_permission.value} to user {user_data['id']}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED)
        return user_data
    return check_permission


def require_any_permission(*permissions: Permission):
    def check_any_permission(
        user_data: dict = Depends(get_current_user_id),
        resolver: PermissionResolver = Depends(get_permission_resolver)
    ) -> dict:
        if not resolver.has_any_permission(user_data["id"], permissions):
            logger.info(f"Denied {[p.value for p in permissions]} to user {user_data['id']}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ACCESS_DENIED)
        return user_data
    return check_any_permission


def get_authorized_actor(
    user_data: Dict[str, Any] = Depends(require_permission(Permission.MANAGE_USERS))
) -> AuthorizedActor:
    """Authorization evidence for mutating user/permission operations"""
    return AuthorizedActor(actor_id=user_data["id"], authorized=True)
