import pytest

from pos_insights.features.auth.permissions import (
    Action,
    Module,
    PermissionMatrix,
    UserRole,
    has_permission,
)

MATRIX = PermissionMatrix.model_validate({"dashboard": {"view": True, "export": False}, "sales": {"create": True}})


def test_granted_pair_is_allowed():
    assert has_permission(UserRole.MANAGER, MATRIX, Module.DASHBOARD, Action.VIEW)
    assert has_permission(UserRole.CASHIER, MATRIX, Module.SALES, Action.CREATE)


@pytest.mark.parametrize(
    "module, action",
    [
        (Module.DASHBOARD, Action.EXPORT),  # explicitly false
        (Module.DASHBOARD, Action.DELETE),  # action not listed
        (Module.USERS, Action.VIEW),  # module not listed
    ],
)
def test_everything_else_is_denied(module, action):
    assert not has_permission(UserRole.ADMIN, MATRIX, module, action)


def test_super_admin_bypasses_matrix():
    empty = PermissionMatrix()
    for module in Module:
        for action in Action:
            assert has_permission(UserRole.SUPER_ADMIN, empty, module, action)


def test_role_stored_as_plain_string():
    assert has_permission("SUPER_ADMIN", PermissionMatrix(), Module.USERS, Action.DELETE)


def test_matrix_document_uses_plain_keys():
    assert MATRIX.to_document() == {"dashboard": {"view": True, "export": False}, "sales": {"create": True}}


def test_stored_matrix_skips_unknown_entries():
    matrix = PermissionMatrix.from_document(
        {
            "dashboard": {"view": True, "approve": True},
            "reports": {"view": True},
            "sales": "all",
            "users": {"create": "yes"},
        }
    )
    assert matrix.to_document() == {"dashboard": {"view": True}, "users": {}}
    assert not has_permission(UserRole.MANAGER, matrix, Module.USERS, Action.CREATE)
