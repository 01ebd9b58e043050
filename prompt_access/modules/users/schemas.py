from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime

from prompt_access.config.permissions_config import Role, Permission, parse_role


class UserRecord(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    role: Optional[Role] = None  # None when the stored value is not a known role
    email_confirmed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("role", mode="before")
    @classmethod
    def _known_role(cls, value):
        return parse_role(value) if value is not None else None

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    id: str
    email: str
    role: Optional[Role] = None

    @field_validator("role", mode="before")
    @classmethod
    def _known_role(cls, value):
        return parse_role(value) if value is not None else None


class UserWithPermissionsResponse(UserRecord):
    permissions: List[Permission]  # role baseline


class UserStatsResponse(BaseModel):
    total_users: int
    admin_users: int  # Owners and Admins


class RoleUpdate(BaseModel):
    role: Role
