"""Tests for the role/permission table."""

from prompt_access.config.permissions_config import (
    Permission,
    Role,
    ROLE_PERMISSIONS,
    get_permission_matrix,
    get_role_permissions,
    parse_permission,
    parse_role,
    sort_permissions,
)


def test_owner_baseline_is_every_permission():
    assert get_role_permissions(Role.OWNER) == frozenset(Permission)
    assert Role.OWNER not in ROLE_PERMISSIONS


def test_admin_and_developer_baselines():
    assert get_role_permissions(Role.ADMIN) == {Permission.VIEW_PROMPTS}
    assert get_role_permissions(Role.DEVELOPER) == {
        Permission.VIEW_PROMPTS,
        Permission.CREATE_PROMPTS,
        Permission.EDIT_PROMPTS,
        Permission.DELETE_PROMPTS,
    }


def test_unknown_role_gets_empty_baseline():
    assert parse_role("Superuser") is None
    assert get_role_permissions(None) == frozenset()


def test_parse_values():
    assert parse_role("Owner") is Role.OWNER
    assert parse_role(Role.ADMIN) is Role.ADMIN
    assert parse_permission("MANAGE_USERS") is Permission.MANAGE_USERS
    assert parse_permission("FLY") is None


def test_sort_permissions_dedups_in_declaration_order():
    ordered = sort_permissions([Permission.MANAGE_USERS, Permission.VIEW_PROMPTS, Permission.MANAGE_USERS])
    assert ordered == (Permission.VIEW_PROMPTS, Permission.MANAGE_USERS)


def test_permission_matrix_lists_roles_and_permissions():
    matrix = get_permission_matrix()
    assert [p["name"] for p in matrix["permissions"]] == [p.value for p in Permission]
    roles = {r["name"]: r["permissions"] for r in matrix["roles"]}
    assert roles["Owner"] == [p.value for p in Permission]
    assert roles["Admin"] == ["VIEW_PROMPTS"]
