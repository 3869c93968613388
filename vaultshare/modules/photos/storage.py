import logging
import time
import uuid
from typing import Optional

from vaultshare.core.errors import is_backend_reported, to_backend_error
from vaultshare.core.retry import with_retry
from vaultshare.database.supabase_client import BackendConnector
from vaultshare.modules.photos.schemas import StoredObject

logger = logging.getLogger(__name__)

STORAGE_MAX_RETRIES = 2


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1]


def build_object_key(
    user_id: str,
    vault_id: str,
    filename: str,
    timestamp_ms: Optional[int] = None,
    suffix: Optional[str] = None,
) -> str:
    """Bucket key for a vault photo: {user_id}/{vault_id}/{timestamp_ms}-{suffix}.{ext}"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    if suffix is None:
        suffix = uuid.uuid4().hex[:6]
    return f"{user_id}/{vault_id}/{timestamp_ms}-{suffix}.{file_extension(filename)}"


def build_avatar_key(user_id: str, filename: str) -> str:
    return f"{user_id}/avatar.{file_extension(filename)}"


class PhotoStorage:
    """Object-store side of photo uploads (the `photos` bucket)."""

    def __init__(self, connector: BackendConnector):
        self.connector = connector

    async def upload(
        self, key: str, content: bytes, content_type: str, upsert: bool = False
    ) -> StoredObject:
        """Write bytes under `key` and return the object's public URL.

        Raises BackendError when the store rejects the write and
        RetryExhaustedError when it cannot be reached.
        """
        file_options = {"content-type": content_type, "upsert": "true" if upsert else "false"}
        attempts = 0

        async def write():
            nonlocal attempts
            attempts += 1
            try:
                return await self.connector.bucket().upload(key, content, file_options)
            except Exception as e:
                # An earlier attempt whose response was lost may already have stored the object
                if attempts > 1 and is_backend_reported(e) and to_backend_error(e).is_conflict:
                    logger.warning(f"{key} was already stored by an earlier attempt")
                    return None
                raise

        logger.info(f"Uploading {len(content)} bytes to {self.connector.photos_bucket}/{key}")
        try:
            await with_retry(write, max_retries=STORAGE_MAX_RETRIES, label="upload photo file")
        except Exception as e:
            if is_backend_reported(e):
                raise to_backend_error(e) from e
            raise

        public_url = await self.connector.bucket().get_public_url(key)
        return StoredObject(key=key, public_url=public_url)

    async def upload_photo(
        self, user_id: str, vault_id: str, filename: str, content: bytes, content_type: str
    ) -> StoredObject:
        key = build_object_key(user_id, vault_id, filename)
        return await self.upload(key, content, content_type, upsert=True)

    async def upload_avatar(
        self, user_id: str, filename: str, content: bytes, content_type: str
    ) -> StoredObject:
        return await self.upload(build_avatar_key(user_id, filename), content, content_type, upsert=True)
