from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

from vaultshare.modules.photos.schemas import PhotoResponse
from vaultshare.modules.usage.schemas import DashboardStats, StorageEstimate
from vaultshare.modules.vaults.schemas import VaultView

DEFAULT_PER_PHOTO_MB = 2.5
DEFAULT_QUOTA_MB = 1024
RECENT_WINDOW = timedelta(days=7)


def estimate_storage(
    total_photos: int,
    per_photo_mb: float = DEFAULT_PER_PHOTO_MB,
    quota_mb: float = DEFAULT_QUOTA_MB,
) -> StorageEstimate:
    """Approximate storage use from a photo count.

    The percentage is capped at 100; available space is not clamped and goes
    negative once the quota is exceeded.
    """
    if total_photos < 0:
        raise ValueError("total_photos must be >= 0")
    if quota_mb <= 0:
        raise ValueError("quota_mb must be > 0")
    used_mb = total_photos * per_photo_mb
    return StorageEstimate(
        used_mb=used_mb,
        total_mb=quota_mb,
        used_percentage=min(used_mb / quota_mb * 100, 100),
        available_mb=quota_mb - used_mb,
    )


def total_photo_count(vaults: Iterable[VaultView]) -> int:
    return sum(v.photo_count for v in vaults)


def build_dashboard_stats(
    vaults: Sequence[VaultView],
    recent_photos: Sequence[PhotoResponse],
    now: Optional[datetime] = None,
    per_photo_mb: float = DEFAULT_PER_PHOTO_MB,
    quota_mb: float = DEFAULT_QUOTA_MB,
) -> DashboardStats:
    if now is None:
        now = datetime.now(timezone.utc)
    week_ago = now - RECENT_WINDOW
    total_photos = total_photo_count(vaults)
    recent = 0
    for photo in recent_photos:
        created_at = photo.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        if created_at > week_ago:
            recent += 1
    return DashboardStats(
        total_photos=total_photos,
        total_vaults=len(vaults),
        recent_uploads=recent,
        storage=estimate_storage(total_photos, per_photo_mb, quota_mb),
    )
