"""Pydantic schemas for authentication and user administration."""

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import User
from .permissions import PermissionMatrix, UserRole


class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=100, description="Username")
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8, description="User password")
    role: UserRole = Field(UserRole.CASHIER, description="User role")
    permissions: PermissionMatrix = Field(default_factory=PermissionMatrix)


class UserResponse(UserBase):
    id: str = Field(..., description="ObjectId of the user document")
    role: UserRole
    is_active: bool = Field(..., description="Whether the user account is active")
    permissions: PermissionMatrix
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(protected_namespaces=())

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            is_active=user.is_active,
            permissions=user.permission_matrix,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class PermissionsUpdate(BaseModel):
    permissions: PermissionMatrix


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    sub: Optional[str] = None
