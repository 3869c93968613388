from fastapi import APIRouter, Depends, File, UploadFile
from typing import Dict

from vaultshare.core.dependencies import (
    get_current_user, get_photo_storage, get_profile_repository, unwrap_or_raise,
)
from vaultshare.modules.photos.schemas import UploadCandidate
from vaultshare.modules.photos.storage import PhotoStorage
from vaultshare.modules.photos.upload import check_file
from vaultshare.modules.profiles.repository import ProfileRepository
from vaultshare.modules.profiles.schemas import ProfileResponse, ProfileUpdate

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user_data: Dict = Depends(get_current_user),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    """Get the current user's profile"""
    return unwrap_or_raise(await profiles.get(user_data["id"]))


@router.put("", response_model=ProfileResponse)
async def save_profile(
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user),
    profiles: ProfileRepository = Depends(get_profile_repository),
):
    """Save the current user's profile, creating it on first save"""
    return unwrap_or_raise(await profiles.save(user_data["id"], profile_data.changed_fields()))


@router.post("/avatar", response_model=ProfileResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    user_data: Dict = Depends(get_current_user),
    profiles: ProfileRepository = Depends(get_profile_repository),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    """Replace the current user's avatar image"""
    content = await file.read()
    candidate = UploadCandidate(
        filename=file.filename or "avatar",
        content_type=file.content_type or "",
        size=len(content),
    )
    check_file(candidate)
    stored = await storage.upload_avatar(user_data["id"], candidate.filename, content, candidate.content_type)
    return unwrap_or_raise(await profiles.save(user_data["id"], {"avatar_url": stored.public_url}))
