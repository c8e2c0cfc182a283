"""Back-office permission matrix.

A user's permissions are a sparse mapping of module -> action -> allowed.
Pairs that are not listed are denied. SUPER_ADMIN users skip the check
entirely."""

from enum import Enum
from pydantic import Field, RootModel


class UserRole(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    CASHIER = "CASHIER"


class Module(str, Enum):
    DASHBOARD = "dashboard"
    SALES = "sales"
    PRODUCTS = "products"
    INVENTORY = "inventory"
    CASH_DRAWER = "cash_drawer"
    SHIFTS = "shifts"
    USERS = "users"


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    EXPORT = "export"


class PermissionMatrix(RootModel[dict[Module, dict[Action, bool]]]):
    root: dict[Module, dict[Action, bool]] = Field(default_factory=dict)

    def allows(self, module: Module, action: Action) -> bool:
        return self.root.get(module, {}).get(action, False)

    def to_document(self) -> dict[str, dict[str, bool]]:
        return self.model_dump(mode="json")

    @classmethod
    def from_document(cls, document: dict) -> "PermissionMatrix":
        """Reads a stored matrix, skipping modules and actions this version does not know."""
        modules = {module.value for module in Module}
        actions = {action.value for action in Action}
        matrix = {}
        for module, granted in (document or {}).items():
            if module not in modules or not isinstance(granted, dict):
                continue
            matrix[module] = {
                action: allowed
                for action, allowed in granted.items()
                if action in actions and isinstance(allowed, bool)
            }
        return cls.model_validate(matrix)


def has_permission(role: str, permissions: PermissionMatrix, module: Module, action: Action) -> bool:
    if role == UserRole.SUPER_ADMIN:
        return True
    return permissions.allows(module, action)

