from typing import Any, Dict, List, Sequence

from vaultshare.core.repository import SupabaseRepository, expect_rows, require_id
from vaultshare.core.result import Result
from vaultshare.modules.photos.schemas import PhotoResponse

RECENT_PHOTOS_LIMIT = 12


def _to_photo(row: Dict[str, Any]) -> PhotoResponse:
    row = dict(row)
    # `vaults(name)` embed from list_recent
    vault = row.pop("vaults", None)
    if isinstance(vault, list):
        vault = vault[0] if vault else None
    if isinstance(vault, dict):
        row["vault_name"] = vault.get("name")
    return PhotoResponse(**row)


class PhotoRepository(SupabaseRepository):
    table_name = "photos"

    async def get(self, photo_id: str) -> Result[PhotoResponse]:
        """Get photo by ID"""
        require_id(photo_id, "photo_id")

        async def query():
            return await self.table()\
                .select("*")\
                .eq("id", photo_id)\
                .single()\
                .execute()

        return await self._run("fetch photo", query, _to_photo)

    async def create(
        self,
        vault_id: str,
        user_id: str,
        title: str,
        file_url: str,
        description: str = "",
    ) -> Result[PhotoResponse]:
        """Insert the record for an already-stored photo"""
        require_id(vault_id, "vault_id")
        require_id(user_id, "user_id")
        if not file_url:
            raise ValueError("file_url is required")
        payload = {
            "vault_id": vault_id,
            "uploaded_by": user_id,
            "title": title,
            "description": description,
            "file_url": file_url,
        }

        async def query():
            response = await self.table().insert(payload).execute()
            return expect_rows(response, "Photo")

        return await self._run("create photo", query, lambda data: _to_photo(data[0]))

    async def update(self, photo_id: str, fields: Dict[str, Any]) -> Result[PhotoResponse]:
        """Edit title and/or description; other photo fields are immutable"""
        require_id(photo_id, "photo_id")
        update_data = {k: v for k, v in fields.items() if k in ("title", "description")}
        if not update_data:
            raise ValueError("Only title and description can be updated")

        async def query():
            response = await self.table()\
                .update(update_data)\
                .eq("id", photo_id)\
                .execute()
            return expect_rows(response, "Photo")

        return await self._run("update photo", query, lambda data: _to_photo(data[0]))

    async def delete(self, photo_id: str) -> Result[bool]:
        """Delete the photo record; the stored object is left in the bucket"""
        require_id(photo_id, "photo_id")

        async def query():
            response = await self.table()\
                .delete()\
                .eq("id", photo_id)\
                .execute()
            return expect_rows(response, "Photo")

        return await self._run("delete photo", query, lambda data: True)

    async def list_by_vault(self, vault_id: str) -> Result[List[PhotoResponse]]:
        """Photos in a vault, newest first"""
        require_id(vault_id, "vault_id")

        async def query():
            return await self.table()\
                .select("*")\
                .eq("vault_id", vault_id)\
                .order("created_at", desc=True)\
                .execute()

        return await self._run(
            "fetch vault photos", query, lambda data: [_to_photo(row) for row in data or []]
        )

    async def list_recent(
        self, vault_ids: Sequence[str], limit: int = RECENT_PHOTOS_LIMIT
    ) -> Result[List[PhotoResponse]]:
        """Most recent photos across the given vaults, with the vault name attached"""
        if not vault_ids:
            return Result.success([])

        async def query():
            return await self.table()\
                .select("*, vaults(name)")\
                .in_("vault_id", list(vault_ids))\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()

        return await self._run(
            "fetch recent photos", query, lambda data: [_to_photo(row) for row in data or []]
        )
