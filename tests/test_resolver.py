"""Tests for the permission resolver."""

import pytest

from prompt_access.config.permissions_config import Permission, Role
from prompt_access.core.exceptions import NotFoundError, StoreFailure
from prompt_access.modules.permissions.resolver import resolve_decision
from prompt_access.modules.permissions.schemas import PermissionOverride


ALL = tuple(Permission)
DEV_BASELINE = (
    Permission.VIEW_PROMPTS,
    Permission.CREATE_PROMPTS,
    Permission.EDIT_PROMPTS,
    Permission.DELETE_PROMPTS,
)


class TestHasPermission:

    @pytest.mark.parametrize("role", list(Role))
    def test_revocation_wins_over_role_and_grant(self, db, resolver, role):
        db.add_user("u", role)
        for permission in Permission:
            db.overrides[("u", permission)] = True
        for permission in Permission:
            assert resolver.has_permission("u", permission) is False

    @pytest.mark.parametrize("permission", list(Permission))
    def test_owner_has_every_permission(self, resolver, permission):
        assert resolver.has_permission("owner-1", permission) is True

    def test_owner_permission_can_be_revoked(self, db, resolver):
        db.overrides[("owner-1", Permission.MANAGE_USERS)] = True
        assert resolver.has_permission("owner-1", Permission.MANAGE_USERS) is False
        assert resolver.has_permission("owner-1", Permission.VIEW_PROMPTS) is True

    def test_individual_grant_beyond_role(self, db, resolver):
        assert resolver.has_permission("admin-1", Permission.CREATE_PROMPTS) is False
        db.overrides[("admin-1", Permission.CREATE_PROMPTS)] = False
        assert resolver.has_permission("admin-1", Permission.CREATE_PROMPTS) is True

    def test_role_baseline(self, resolver):
        assert resolver.has_permission("dev-1", Permission.EDIT_PROMPTS) is True
        assert resolver.has_permission("dev-1", Permission.MANAGE_USERS) is False

    def test_unknown_user_is_denied(self, resolver):
        assert resolver.has_permission("ghost", Permission.VIEW_PROMPTS) is False

    def test_store_failure_is_denied(self, db, resolver):
        db.failing_users.add("owner-1")
        assert resolver.has_permission("owner-1", Permission.VIEW_PROMPTS) is False

    def test_unknown_stored_role_is_not_owner(self, db, resolver):
        db.add_user("legacy", "Superuser")
        for permission in Permission:
            assert resolver.has_permission("legacy", permission) is False

    def test_unknown_permission_value_is_denied(self, resolver):
        assert resolver.has_permission("owner-1", "LAUNCH_ROCKETS") is False

    def test_decision_is_reread_after_change(self, db, resolver):
        assert resolver.has_permission("dev-1", Permission.DELETE_PROMPTS) is True
        db.overrides[("dev-1", Permission.DELETE_PROMPTS)] = True
        assert resolver.has_permission("dev-1", Permission.DELETE_PROMPTS) is False


class TestEffectivePermissions:

    def test_scenario_grant_then_revoke(self, db, resolver):
        db.overrides[("dev-1", Permission.MANAGE_USERS)] = False
        view = resolver.compute_effective_permissions("dev-1")
        assert set(view.all_permissions) == set(DEV_BASELINE) | {Permission.MANAGE_USERS}
        assert view.individual_permissions == (Permission.MANAGE_USERS,)

        db.overrides[("dev-1", Permission.CREATE_PROMPTS)] = True
        view = resolver.compute_effective_permissions("dev-1")
        assert set(view.all_permissions) == {
            Permission.MANAGE_USERS,
            Permission.VIEW_PROMPTS,
            Permission.EDIT_PROMPTS,
            Permission.DELETE_PROMPTS,
        }
        assert view.revoked_permissions == (Permission.CREATE_PROMPTS,)
        assert view.role_permissions == DEV_BASELINE

    def test_owner_view(self, resolver):
        view = resolver.compute_effective_permissions("owner-1")
        assert view.role is Role.OWNER
        assert view.role_permissions == ALL
        assert view.all_permissions == ALL

    def test_matches_has_permission(self, db, resolver):
        db.overrides[("admin-1", Permission.EDIT_PROMPTS)] = False
        db.overrides[("admin-1", Permission.VIEW_PROMPTS)] = True
        view = resolver.compute_effective_permissions("admin-1")
        for permission in Permission:
            assert (permission in view.all_permissions) == resolver.has_permission("admin-1", permission)

    def test_snapshot_is_frozen(self, resolver):
        view = resolver.compute_effective_permissions("dev-1")
        with pytest.raises(Exception):
            view.role = Role.OWNER

    def test_missing_user_raises_not_found(self, resolver):
        with pytest.raises(NotFoundError):
            resolver.compute_effective_permissions("ghost")

    def test_store_failure_propagates(self, db, resolver):
        db.failing_users.add("dev-1")
        with pytest.raises(StoreFailure):
            resolver.compute_effective_permissions("dev-1")


def test_resolve_decision_precedence():
    revoked = PermissionOverride(user_id="u", permission=Permission.VIEW_PROMPTS, is_revoked=True)
    granted = PermissionOverride(user_id="u", permission=Permission.MANAGE_USERS, is_revoked=False)
    assert resolve_decision(Role.OWNER, Permission.VIEW_PROMPTS, revoked) is False
    assert resolve_decision(Role.ADMIN, Permission.MANAGE_USERS, granted) is True
    assert resolve_decision(Role.OWNER, Permission.MANAGE_USERS, None) is True
    assert resolve_decision(None, Permission.VIEW_PROMPTS, None) is False


def test_prompt_helpers(db, resolver):
    assert resolver.can_manage_prompts("admin-1") is False
    assert resolver.can_view_prompts("admin-1") is True
    db.overrides[("admin-1", Permission.DELETE_PROMPTS)] = False
    assert resolver.can_manage_prompts("admin-1") is True
    assert resolver.can_manage_users("owner-1") is True
    assert resolver.can_manage_users("dev-1") is False
