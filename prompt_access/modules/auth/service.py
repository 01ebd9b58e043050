import hashlib
import time
import logging
from supabase import Client
from fastapi import HTTPException
from typing import Dict, Any

logger = logging.getLogger(__name__)

# Short-lived cache of verified identities (id/email only). Roles and
# permissions are never cached here; they are re-read for every decision.
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


def _evict_expired(now: float) -> None:
    for key, (_, expiry) in list(_AUTH_USER_CACHE.items()):
        if now >= expiry:
            _AUTH_USER_CACHE.pop(key, None)


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve the acting principal from a Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            cached = _AUTH_USER_CACHE.get(cache_key)
            if cached is not None:
                user_data, expiry = cached
                if now < expiry:
                    return user_data
                _AUTH_USER_CACHE.pop(cache_key, None)
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
            }
            if len(_AUTH_USER_CACHE) >= _AUTH_CACHE_MAX_SIZE:
                _evict_expired(now)
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            logger.info(f"Token verification failed: {error_msg}")
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")
