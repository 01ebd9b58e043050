"""Tests for bearer token verification."""

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from prompt_access.modules.auth import service as auth_service
from prompt_access.modules.auth.service import AuthService, clear_auth_cache


@pytest.fixture(autouse=True)
def empty_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


def test_verified_identity_is_cached():
    supabase = MagicMock()
    supabase.auth.get_user.return_value = MagicMock(user=MagicMock(id="u1", email="u1@example.com"))
    service = AuthService(supabase)

    assert service.get_current_user("token-a") == {"id": "u1", "email": "u1@example.com"}
    assert service.get_current_user("token-a")["id"] == "u1"
    supabase.auth.get_user.assert_called_once_with(jwt="token-a")


def test_missing_user_is_401():
    supabase = MagicMock()
    supabase.auth.get_user.return_value = MagicMock(user=None)
    with pytest.raises(HTTPException) as excinfo:
        AuthService(supabase).get_current_user("token-b")
    assert excinfo.value.status_code == 401


def test_expired_token_is_401():
    supabase = MagicMock()
    supabase.auth.get_user.side_effect = RuntimeError("JWT expired")
    with pytest.raises(HTTPException) as excinfo:
        AuthService(supabase).get_current_user("token-c")
    assert excinfo.value.detail == "Invalid or expired token"


def make_auth_client(user_id="u1"):
    supabase = MagicMock()
    supabase.auth.get_user.return_value = MagicMock(user=MagicMock(id=user_id, email=f"{user_id}@example.com"))
    return supabase


def test_expired_entry_is_refreshed():
    supabase = make_auth_client()
    key = auth_service.hashlib.sha256(b"token-d").hexdigest()
    auth_service._AUTH_USER_CACHE[key] = ({"id": "stale", "email": None}, 0.0)

    assert AuthService(supabase).get_current_user("token-d")["id"] == "u1"
    supabase.auth.get_user.assert_called_once_with(jwt="token-d")


def test_full_cache_of_expired_entries_is_swept():
    for i in range(auth_service._AUTH_CACHE_MAX_SIZE):
        auth_service._AUTH_USER_CACHE[f"old-{i}"] = ({"id": f"old-{i}", "email": None}, 0.0)
    supabase = make_auth_client()
    service = AuthService(supabase)

    service.get_current_user("token-e")
    service.get_current_user("token-e")

    supabase.auth.get_user.assert_called_once_with(jwt="token-e")
    assert not any(key.startswith("old-") for key in auth_service._AUTH_USER_CACHE)
