from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from typing import Dict, List

from vaultshare.core.dependencies import (
    get_current_user, get_membership_resolver, get_photo_repository, get_upload_service,
    require_vault_member, unwrap_or_raise,
)
from vaultshare.modules.photos.repository import PhotoRepository
from vaultshare.modules.photos.schemas import (
    PhotoResponse, PhotoUpdate, UploadBatchResult, UploadCandidate,
)
from vaultshare.modules.photos.upload import UploadService, select_files
from vaultshare.modules.vaults.membership import MembershipResolver

router = APIRouter(prefix="/photos", tags=["photos"])


@router.post("/upload", response_model=UploadBatchResult)
async def upload_photos(
    vault_id: str = Form(...),
    files: List[UploadFile] = File(...),
    user_data: Dict = Depends(get_current_user),
    uploads: UploadService = Depends(get_upload_service),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Upload a batch of photos into a vault; per-file status is reported back"""
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files to upload")
    await require_vault_member(vault_id, user_data, resolver)
    candidates = []
    for f in files:
        content = await f.read()
        candidates.append(UploadCandidate(
            filename=f.filename or "photo",
            content_type=f.content_type or "",
            size=len(content),
            content=content,
        ))
    return await uploads.upload_batch(user_data["id"], vault_id, select_files(candidates))


async def _get_accessible_photo(
    photo_id: str, user_data: Dict, photos: PhotoRepository, resolver: MembershipResolver
) -> PhotoResponse:
    photo = unwrap_or_raise(await photos.get(photo_id))
    await require_vault_member(photo.vault_id, user_data, resolver)
    return photo


@router.get("/{photo_id}", response_model=PhotoResponse)
async def get_photo(
    photo_id: str,
    user_data: Dict = Depends(get_current_user),
    photos: PhotoRepository = Depends(get_photo_repository),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Get photo by ID (only if user is a member of its vault)"""
    return await _get_accessible_photo(photo_id, user_data, photos, resolver)


@router.put("/{photo_id}", response_model=PhotoResponse)
async def update_photo(
    photo_id: str,
    photo_data: PhotoUpdate,
    user_data: Dict = Depends(get_current_user),
    photos: PhotoRepository = Depends(get_photo_repository),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Edit a photo's title or description"""
    await _get_accessible_photo(photo_id, user_data, photos, resolver)
    fields = photo_data.changed_fields()
    if not fields:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update")
    return unwrap_or_raise(await photos.update(photo_id, fields))


@router.delete("/{photo_id}", status_code=204)
async def delete_photo(
    photo_id: str,
    user_data: Dict = Depends(get_current_user),
    photos: PhotoRepository = Depends(get_photo_repository),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Delete a photo record (uploader or vault owner/admin)"""
    photo = await _get_accessible_photo(photo_id, user_data, photos, resolver)
    if photo.uploaded_by != user_data["id"]:
        await require_vault_member(photo.vault_id, user_data, resolver, elevated=True)
    unwrap_or_raise(await photos.delete(photo_id))
    return None
