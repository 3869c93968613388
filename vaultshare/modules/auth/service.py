import hashlib
import logging
import time
from typing import Any, Dict

from fastapi import HTTPException

from vaultshare.core.errors import ErrorKind, classify_error
from vaultshare.database.supabase_client import BackendConnector

logger = logging.getLogger(__name__)

# Short-lived cache so bursts of requests with one token hit Supabase Auth once
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class IdentityService:
    """Resolves a session token to the user it belongs to via Supabase Auth."""

    def __init__(self, connector: BackendConnector):
        self.connector = connector

    async def get_current_user(self, token: str) -> Dict[str, Any]:
        cache_key = hashlib.sha256(token.encode()).hexdigest()
        now = time.monotonic()
        if cache_key in _AUTH_USER_CACHE:
            user_data, expiry = _AUTH_USER_CACHE[cache_key]
            if now < expiry:
                return user_data
            del _AUTH_USER_CACHE[cache_key]

        try:
            user_response = await self.connector.client.auth.get_user(jwt=token)
        except Exception as e:
            if classify_error(e) is ErrorKind.TRANSIENT:
                logger.warning(f"Auth service unreachable: {e}")
                raise HTTPException(status_code=503, detail="Authentication service unavailable")
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        user = user_response.user
        user_data = {"id": user.id, "email": user.email}
        if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
            _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
        return user_data
