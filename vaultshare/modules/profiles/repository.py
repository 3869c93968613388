from datetime import datetime, timezone
from typing import Any, Dict

from vaultshare.core.repository import SupabaseRepository, expect_rows, require_id
from vaultshare.core.result import Result
from vaultshare.modules.profiles.schemas import ProfileResponse


class ProfileRepository(SupabaseRepository):
    table_name = "profiles"

    async def get(self, user_id: str) -> Result[ProfileResponse]:
        """Get profile by user ID"""
        require_id(user_id, "user_id")

        async def query():
            return await self.table()\
                .select("*")\
                .eq("id", user_id)\
                .single()\
                .execute()

        return await self._run("fetch profile", query, lambda data: ProfileResponse(**data))

    async def create(self, user_id: str, fields: Dict[str, Any]) -> Result[ProfileResponse]:
        """Create the profile row for a user"""
        require_id(user_id, "user_id")
        payload = {**fields, "id": user_id}

        async def query():
            response = await self.table().insert(payload).execute()
            return expect_rows(response, "Profile")

        return await self._run("create profile", query, lambda data: ProfileResponse(**data[0]))

    async def update(self, user_id: str, fields: Dict[str, Any]) -> Result[ProfileResponse]:
        """Partially update a profile; unspecified fields are left as they are"""
        require_id(user_id, "user_id")
        if not fields:
            raise ValueError("No profile fields to update")
        update_data = {k: v for k, v in fields.items() if k != "id"}
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        async def query():
            response = await self.table()\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
            return expect_rows(response, "Profile")

        return await self._run("update profile", query, lambda data: ProfileResponse(**data[0]))

    async def save(self, user_id: str, fields: Dict[str, Any]) -> Result[ProfileResponse]:
        """Update the profile, creating it on first save"""
        existing = await self.get(user_id)
        if existing.ok:
            return await self.update(user_id, fields) if fields else existing
        if existing.error.is_not_found:
            return await self.create(user_id, fields)
        return existing
