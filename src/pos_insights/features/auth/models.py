from typing import Any

from pydantic import Field
from pymongo import ASCENDING

from ...common.models import TimestampMixin
from .permissions import PermissionMatrix, UserRole

USERS_COLLECTION = "users"


class User(TimestampMixin):
    username: str
    hashed_password: str
    role: UserRole = UserRole.CASHIER
    first_name: str = ""
    last_name: str = ""
    is_active: bool = True
    # Stored as-is; unknown entries are dropped when read through permission_matrix.
    permissions: dict[str, Any] = Field(default_factory=dict)

    @property
    def permission_matrix(self) -> PermissionMatrix:
        return PermissionMatrix.from_document(self.permissions)

    def __str__(self):
        return f"{self.username} ({self.role})"


INDEXES = [
    (USERS_COLLECTION, [("username", ASCENDING)], {"unique": True}),
]
