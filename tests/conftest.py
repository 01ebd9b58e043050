"""Pytest configuration and fixtures for prompt-access tests."""

import pytest

from prompt_access.config.permissions_config import Role
from prompt_access.modules.permissions.resolver import PermissionResolver
from prompt_access.modules.permissions.schemas import AuthorizedActor
from prompt_access.modules.permissions.service import PermissionService
from prompt_access.modules.permissions.sync import PermissionSyncService
from tests.fakes import FakeDatabase, FakePermissionLedger, FakeUserStore


@pytest.fixture
def db():
    database = FakeDatabase()
    database.add_user("owner-1", Role.OWNER)
    database.add_user("admin-1", Role.ADMIN)
    database.add_user("dev-1", Role.DEVELOPER)
    return database


@pytest.fixture
def user_store(db):
    return FakeUserStore(db)


@pytest.fixture
def ledger(db):
    return FakePermissionLedger(db)


@pytest.fixture
def resolver(user_store, ledger):
    return PermissionResolver(user_store, ledger)


@pytest.fixture
def permission_service(user_store, ledger, resolver):
    return PermissionService(user_store, ledger, resolver)


@pytest.fixture
def sync_service(user_store, ledger, resolver):
    return PermissionSyncService(user_store, ledger, resolver, max_workers=2)


@pytest.fixture
def actor():
    """Authorization evidence as produced by the MANAGE_USERS route dependency."""
    return AuthorizedActor(actor_id="owner-1", authorized=True)
