from fastapi import APIRouter, Depends
from typing import Dict

from vaultshare.config import settings
from vaultshare.core.dependencies import (
    get_current_user, get_membership_resolver, get_photo_repository, unwrap_or_raise,
)
from vaultshare.modules.photos.repository import PhotoRepository
from vaultshare.modules.usage.schemas import DashboardStats, StorageEstimate
from vaultshare.modules.usage.service import build_dashboard_stats, estimate_storage, total_photo_count
from vaultshare.modules.vaults.membership import MembershipResolver

router = APIRouter(prefix="/usage", tags=["usage"])


@router.get("/storage", response_model=StorageEstimate)
async def get_storage_usage(
    user_data: Dict = Depends(get_current_user),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Estimated storage used across the current user's vaults"""
    vaults = unwrap_or_raise(await resolver.get_user_vaults(user_data["id"]))
    return estimate_storage(total_photo_count(vaults), settings.per_photo_mb, settings.storage_quota_mb)


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard_stats(
    user_data: Dict = Depends(get_current_user),
    resolver: MembershipResolver = Depends(get_membership_resolver),
    photos: PhotoRepository = Depends(get_photo_repository),
):
    """Vault/photo totals, uploads in the last week and storage estimate"""
    vaults = unwrap_or_raise(await resolver.get_user_vaults(user_data["id"]))
    recent = unwrap_or_raise(await photos.list_recent([v.id for v in vaults]))
    return build_dashboard_stats(
        vaults, recent, per_photo_mb=settings.per_photo_mb, quota_mb=settings.storage_quota_mb
    )
