"""Tests for the nightly permission sync job."""

import pytest

from prompt_access.config.permissions_config import Permission
from prompt_access.scripts import sync_permissions
from tests.fakes import FakePermissionLedger, FakeUserStore


@pytest.fixture
def wired(db, monkeypatch):
    monkeypatch.setattr(sync_permissions, "get_service_supabase", lambda: object())
    monkeypatch.setattr(sync_permissions, "UserService", lambda supabase: FakeUserStore(db))
    monkeypatch.setattr(sync_permissions, "PermissionLedger", lambda supabase: FakePermissionLedger(db))
    return db


def test_additive_run(wired):
    wired.overrides[("dev-1", Permission.EDIT_PROMPTS)] = True
    wired.overrides[("dev-1", Permission.MANAGE_USERS)] = False

    assert sync_permissions.main([]) == 0

    assert wired.overrides[("dev-1", Permission.EDIT_PROMPTS)] is False
    assert wired.overrides[("dev-1", Permission.MANAGE_USERS)] is False


def test_strict_run_with_initialization(wired):
    wired.overrides[("dev-1", Permission.MANAGE_USERS)] = False

    assert sync_permissions.main(["--remove-extra", "--initialize-missing", "--workers", "1"]) == 0

    assert wired.overrides[("dev-1", Permission.MANAGE_USERS)] is True
    assert wired.rows_for("admin-1") == {Permission.VIEW_PROMPTS: False}


def test_failed_user_sets_exit_code(wired):
    wired.failing_users.add("admin-1")
    assert sync_permissions.main([]) == 1


def test_additive_run_overrides_strict_default(wired, monkeypatch):
    monkeypatch.setattr(sync_permissions.settings, "sync_remove_extra_default", True)
    wired.overrides[("dev-1", Permission.MANAGE_USERS)] = False

    assert sync_permissions.parse_args([]).remove_extra is True
    assert sync_permissions.main(["--no-remove-extra"]) == 0

    assert wired.overrides[("dev-1", Permission.MANAGE_USERS)] is False
