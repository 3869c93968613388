"""
Membership resolution: which vaults a user belongs to, with photo counts.

PostgREST embeds the joined `vaults` resource as a single object when it
infers a to-one relationship and as an array otherwise. The backend has
returned both shapes for the same query, so the raw rows are normalized
here and nothing above this module ever sees the ambiguity.
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, List

from vaultshare.core.repository import SupabaseRepository, require_id
from vaultshare.core.result import Result
from vaultshare.modules.vaults.schemas import VaultRole, VaultView

logger = logging.getLogger(__name__)

USER_VAULTS_SELECT = (
    "role, "
    "vaults (id, name, description, color, created_at, created_by, photos(count))"
)


def as_sequence(value: Any) -> List[Mapping]:
    """Canonicalize a one-or-many embed: None, a single mapping, or a list of mappings."""
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, Mapping)]
    return []


def read_photo_count(value: Any) -> int:
    """Aggregate count as embedded by `photos(count)`; anything unreadable counts as 0."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if isinstance(value, Mapping):
        value = value.get("count")
    if isinstance(value, bool):
        return 0
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return count if count >= 0 else 0


def flatten_memberships(rows: Iterable[Mapping]) -> List[VaultView]:
    """One VaultView per (membership, vault) pair, in the order the rows arrived."""
    views = []
    for row in rows or []:
        role = row.get("role") or VaultRole.MEMBER.value
        for vault in as_sequence(row.get("vaults")):
            fields = {k: v for k, v in vault.items() if k != "photos"}
            views.append(VaultView(
                **fields,
                role=role,
                photo_count=read_photo_count(vault.get("photos")),
            ))
    return views


class MembershipResolver(SupabaseRepository):
    table_name = "vault_members"

    async def get_user_vaults(self, user_id: str) -> Result[List[VaultView]]:
        """Vaults the user is a member of, newest vault first"""
        require_id(user_id, "user_id")

        async def query():
            return await self.table()\
                .select(USER_VAULTS_SELECT)\
                .eq("user_id", user_id)\
                .order("vaults(created_at)", desc=True)\
                .execute()

        result = await self._run("fetch user vaults", query, flatten_memberships)
        if result.ok:
            logger.debug(f"Resolved {len(result.data)} vault(s) for user {user_id}")
        return result
