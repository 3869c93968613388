"""
Batch photo upload.

Each file goes through two phases: the bytes are written to the object
store, then the photo record is inserted with the resulting public URL.
The phases are not transactional; when the insert fails the stored object
stays behind and its key is logged.
"""

import logging
import os
import uuid
from typing import Iterable, List, Optional

from vaultshare.config import settings
from vaultshare.core.errors import ValidationError, VaultShareError
from vaultshare.core.repository import require_id
from vaultshare.modules.photos.repository import PhotoRepository
from vaultshare.modules.photos.schemas import (
    UploadBatchResult, UploadCandidate, UploadItem, UploadStatus,
)
from vaultshare.modules.photos.storage import PhotoStorage

logger = logging.getLogger(__name__)

SOME_FAILED_MESSAGE = "Some files failed to upload. Please review the list above."


def check_file(candidate: UploadCandidate, max_bytes: Optional[int] = None) -> None:
    """Raise ValidationError unless the file is an image within the size limit."""
    if max_bytes is None:
        max_bytes = settings.max_upload_bytes
    if not candidate.content_type.startswith("image/") or candidate.size > max_bytes:
        size_mb = candidate.size / 1024 / 1024
        limit_mb = max_bytes // (1024 * 1024)
        raise ValidationError(
            f"Skipped: Invalid type ({candidate.content_type}) or size "
            f"({size_mb:.2f}MB > {limit_mb}MB)"
        )


def select_files(
    candidates: Iterable[UploadCandidate], max_bytes: Optional[int] = None
) -> List[UploadItem]:
    """Turn picked files into upload items: pending if acceptable, skipped with a reason otherwise."""
    items = []
    for candidate in candidates:
        item = UploadItem(
            id=uuid.uuid4().hex[:9],
            filename=candidate.filename,
            content_type=candidate.content_type,
            size=candidate.size,
            title=candidate.title or os.path.splitext(candidate.filename)[0],
            description=candidate.description,
            content=candidate.content,
        )
        try:
            check_file(candidate, max_bytes)
        except ValidationError as e:
            item.status = UploadStatus.SKIPPED
            item.title = candidate.filename
            item.reason = e.message
        items.append(item)
    return items


class UploadService:
    def __init__(self, storage: PhotoStorage, photos: PhotoRepository):
        self.storage = storage
        self.photos = photos

    async def upload_one(self, item: UploadItem, user_id: str, vault_id: str) -> UploadItem:
        """Store one pending file and record it; failures are recorded on the item."""
        item.status = UploadStatus.UPLOADING
        stored = None
        try:
            stored = await self.storage.upload_photo(
                user_id, vault_id, item.filename, item.content, item.content_type
            )
            created = await self.photos.create(
                vault_id, user_id, item.title, stored.public_url, item.description
            )
            photo = created.unwrap()
        except VaultShareError as e:
            if stored is not None:
                logger.warning(f"Photo record not saved; orphaned object left at {stored.key}")
            logger.error(f"Upload of {item.filename} failed: {e.message}")
            item.status = UploadStatus.FAILED
            item.error_message = e.message
            return item

        item.status = UploadStatus.SUCCESS
        item.photo = photo
        return item

    async def upload_batch(self, user_id: str, vault_id: str, items: List[UploadItem]) -> UploadBatchResult:
        """Upload pending items one at a time; one file failing never stops the rest."""
        require_id(user_id, "user_id")
        require_id(vault_id, "vault_id")
        pending = [i for i in items if i.status == UploadStatus.PENDING]
        logger.info(f"Uploading {len(pending)} of {len(items)} file(s) to vault {vault_id}")

        for item in pending:
            await self.upload_one(item, user_id, vault_id)

        all_successful = all(i.status == UploadStatus.SUCCESS for i in pending)
        result = UploadBatchResult(
            vault_id=vault_id,
            items=items,
            all_successful=all_successful,
            message=None if all_successful else SOME_FAILED_MESSAGE,
        )
        skipped = sum(1 for i in items if i.status == UploadStatus.SKIPPED)
        logger.info(
            f"Upload to vault {vault_id} finished: {len(result.uploaded)} uploaded, "
            f"{len(result.failed)} failed, {skipped} skipped"
        )
        return result
