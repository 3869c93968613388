import logging
from typing import Any, Dict, List

from vaultshare.core.repository import SupabaseRepository, expect_rows, require_id
from vaultshare.core.result import Result
from vaultshare.modules.vaults.schemas import VaultMemberResponse, VaultResponse, VaultRole

logger = logging.getLogger(__name__)

MEMBERS_TABLE = "vault_members"


class VaultRepository(SupabaseRepository):
    table_name = "vaults"

    def members(self):
        return self.connector.table(MEMBERS_TABLE)

    async def get(self, vault_id: str) -> Result[VaultResponse]:
        """Get vault by ID"""
        require_id(vault_id, "vault_id")

        async def query():
            return await self.table()\
                .select("*")\
                .eq("id", vault_id)\
                .single()\
                .execute()

        return await self._run("fetch vault", query, lambda data: VaultResponse(**data))

    async def create(self, fields: Dict[str, Any], user_id: str) -> Result[VaultResponse]:
        """Create a vault and make its creator an owner member"""
        require_id(user_id, "user_id")
        if not fields.get("name"):
            raise ValueError("Vault name is required")
        # Absent keys are left out so column defaults apply
        payload = {k: fields[k] for k in ("name", "description", "color") if k in fields}
        payload["created_by"] = user_id

        async def insert_vault():
            response = await self.table().insert(payload).execute()
            return expect_rows(response, "Vault")

        created = await self._run("create vault", insert_vault, lambda data: VaultResponse(**data[0]))
        if not created.ok:
            return created

        # Idempotent on (vault_id, user_id) so a backend trigger doing the same is harmless
        async def upsert_owner():
            return await self.members().upsert({
                "vault_id": created.data.id,
                "user_id": user_id,
                "role": VaultRole.OWNER.value,
            }, on_conflict="vault_id,user_id").execute()

        membership = await self._run("add vault owner", upsert_owner, lambda data: data)
        if not membership.ok:
            logger.error(
                f"Vault {created.data.id} created but owner membership failed: {membership.error.message}"
            )
            return Result.failure(membership.error)
        return created

    async def update(self, vault_id: str, fields: Dict[str, Any]) -> Result[VaultResponse]:
        """Update vault name, description or color"""
        require_id(vault_id, "vault_id")
        update_data = {k: v for k, v in fields.items() if k in ("name", "description", "color")}
        if not update_data:
            raise ValueError("No vault fields to update")

        async def query():
            response = await self.table()\
                .update(update_data)\
                .eq("id", vault_id)\
                .execute()
            return expect_rows(response, "Vault")

        return await self._run("update vault", query, lambda data: VaultResponse(**data[0]))

    async def delete(self, vault_id: str) -> Result[bool]:
        """Delete vault; photos and memberships cascade in the database"""
        require_id(vault_id, "vault_id")

        async def query():
            response = await self.table()\
                .delete()\
                .eq("id", vault_id)\
                .execute()
            return expect_rows(response, "Vault")

        return await self._run("delete vault", query, lambda data: True)

    async def add_member(
        self, vault_id: str, user_id: str, role: VaultRole = VaultRole.MEMBER
    ) -> Result[VaultMemberResponse]:
        """Add a member to the vault; a second row for the same user violates the unique constraint"""
        require_id(vault_id, "vault_id")
        require_id(user_id, "user_id")

        async def query():
            response = await self.members().insert({
                "vault_id": vault_id,
                "user_id": user_id,
                "role": VaultRole(role).value,
            }).execute()
            return expect_rows(response, "Vault member")

        return await self._run("add vault member", query, lambda data: VaultMemberResponse(**data[0]))

    async def list_members(self, vault_id: str) -> Result[List[VaultMemberResponse]]:
        """List all members of a vault"""
        require_id(vault_id, "vault_id")

        async def query():
            return await self.members()\
                .select("vault_id, user_id, role, created_at")\
                .eq("vault_id", vault_id)\
                .order("created_at")\
                .execute()

        return await self._run(
            "list vault members", query,
            lambda data: [VaultMemberResponse(**member) for member in data or []],
        )
