from fastapi import APIRouter, Depends
from typing import Dict, List

from vaultshare.core.dependencies import (
    get_current_user, get_membership_resolver, get_photo_repository, get_vault_repository,
    require_vault_member, unwrap_or_raise,
)
from vaultshare.modules.photos.repository import PhotoRepository
from vaultshare.modules.photos.schemas import PhotoResponse
from vaultshare.modules.vaults.membership import MembershipResolver
from vaultshare.modules.vaults.repository import VaultRepository
from vaultshare.modules.vaults.schemas import (
    VaultCreate, VaultMemberAdd, VaultMemberResponse, VaultResponse, VaultUpdate, VaultView,
)

router = APIRouter(prefix="/vaults", tags=["vaults"])


@router.get("", response_model=List[VaultView])
async def list_my_vaults(
    user_data: Dict = Depends(get_current_user),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Vaults the current user belongs to, newest first, with photo counts"""
    return unwrap_or_raise(await resolver.get_user_vaults(user_data["id"]))


@router.post("", response_model=VaultResponse, status_code=201)
async def create_vault(
    vault_data: VaultCreate,
    user_data: Dict = Depends(get_current_user),
    vaults: VaultRepository = Depends(get_vault_repository),
):
    """Create a vault owned by the current user"""
    return unwrap_or_raise(await vaults.create(vault_data.model_dump(), user_data["id"]))


@router.get("/{vault_id}", response_model=VaultResponse)
async def get_vault(
    vault_id: str,
    user_data: Dict = Depends(get_current_user),
    vaults: VaultRepository = Depends(get_vault_repository),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Get vault by ID (only if user is a member)"""
    await require_vault_member(vault_id, user_data, resolver)
    return unwrap_or_raise(await vaults.get(vault_id))


@router.put("/{vault_id}", response_model=VaultResponse)
async def update_vault(
    vault_id: str,
    vault_data: VaultUpdate,
    user_data: Dict = Depends(get_current_user),
    vaults: VaultRepository = Depends(get_vault_repository),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Update vault (owner or admin only)"""
    await require_vault_member(vault_id, user_data, resolver, elevated=True)
    return unwrap_or_raise(await vaults.update(vault_id, vault_data.changed_fields()))


@router.delete("/{vault_id}", status_code=204)
async def delete_vault(
    vault_id: str,
    user_data: Dict = Depends(get_current_user),
    vaults: VaultRepository = Depends(get_vault_repository),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Delete vault (owner or admin only)"""
    await require_vault_member(vault_id, user_data, resolver, elevated=True)
    unwrap_or_raise(await vaults.delete(vault_id))
    return None


@router.get("/{vault_id}/members", response_model=List[VaultMemberResponse])
async def list_members(
    vault_id: str,
    user_data: Dict = Depends(get_current_user),
    vaults: VaultRepository = Depends(get_vault_repository),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """List all members of a vault (only if user is a member)"""
    await require_vault_member(vault_id, user_data, resolver)
    return unwrap_or_raise(await vaults.list_members(vault_id))


@router.post("/{vault_id}/members", response_model=VaultMemberResponse, status_code=201)
async def add_member(
    vault_id: str,
    member_data: VaultMemberAdd,
    user_data: Dict = Depends(get_current_user),
    vaults: VaultRepository = Depends(get_vault_repository),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Invite a user into the vault (owner or admin only)"""
    await require_vault_member(vault_id, user_data, resolver, elevated=True)
    return unwrap_or_raise(await vaults.add_member(vault_id, member_data.user_id, member_data.role))


@router.get("/{vault_id}/photos", response_model=List[PhotoResponse])
async def list_vault_photos(
    vault_id: str,
    user_data: Dict = Depends(get_current_user),
    photos: PhotoRepository = Depends(get_photo_repository),
    resolver: MembershipResolver = Depends(get_membership_resolver),
):
    """Photos in the vault, newest first (only if user is a member)"""
    await require_vault_member(vault_id, user_data, resolver)
    return unwrap_or_raise(await photos.list_by_vault(vault_id))
