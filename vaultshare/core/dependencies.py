"""
Request dependencies: the process-wide connector, repositories built on it,
the authenticated user, and translation of backend errors to HTTP errors.
"""

from typing import Any, Dict, TypeVar

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vaultshare.core.errors import BackendError
from vaultshare.core.result import Result
from vaultshare.database.supabase_client import BackendConnector
from vaultshare.modules.auth.service import IdentityService
from vaultshare.modules.photos.repository import PhotoRepository
from vaultshare.modules.photos.storage import PhotoStorage
from vaultshare.modules.photos.upload import UploadService
from vaultshare.modules.profiles.repository import ProfileRepository
from vaultshare.modules.vaults.membership import MembershipResolver
from vaultshare.modules.vaults.repository import VaultRepository
from vaultshare.modules.vaults.schemas import VaultRole

T = TypeVar("T")

security = HTTPBearer()


def get_connector(request: Request) -> BackendConnector:
    return request.app.state.connector


def get_identity_service(connector: BackendConnector = Depends(get_connector)) -> IdentityService:
    return IdentityService(connector)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    identity: IdentityService = Depends(get_identity_service),
) -> Dict[str, Any]:
    """Extract current user info from the bearer session token"""
    return await identity.get_current_user(credentials.credentials)


def get_profile_repository(connector: BackendConnector = Depends(get_connector)) -> ProfileRepository:
    return ProfileRepository(connector)


def get_vault_repository(connector: BackendConnector = Depends(get_connector)) -> VaultRepository:
    return VaultRepository(connector)


def get_photo_repository(connector: BackendConnector = Depends(get_connector)) -> PhotoRepository:
    return PhotoRepository(connector)


def get_membership_resolver(connector: BackendConnector = Depends(get_connector)) -> MembershipResolver:
    return MembershipResolver(connector)


def get_photo_storage(connector: BackendConnector = Depends(get_connector)) -> PhotoStorage:
    return PhotoStorage(connector)


def get_upload_service(
    storage: PhotoStorage = Depends(get_photo_storage),
    photos: PhotoRepository = Depends(get_photo_repository),
) -> UploadService:
    return UploadService(storage, photos)


def http_error_for(error: BackendError) -> HTTPException:
    if error.is_not_found:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if error.is_conflict:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.message)
    if error.is_permission_denied:
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)


def unwrap_or_raise(result: Result[T]) -> T:
    data, error = result
    if error is not None:
        raise http_error_for(error)
    return data


async def require_vault_member(
    vault_id: str,
    user_data: Dict[str, Any],
    resolver: MembershipResolver,
    elevated: bool = False,
) -> None:
    """403 unless the user belongs to the vault (with owner/admin role when `elevated`)"""
    vaults = unwrap_or_raise(await resolver.get_user_vaults(user_data["id"]))
    for view in vaults:
        if view.id != vault_id:
            continue
        if not elevated or VaultRole(view.role).is_elevated:
            return
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You must be a vault owner or admin to perform this action",
        )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You must be a member of this vault",
    )
