import enum
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class VaultRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"

    @property
    def is_elevated(self) -> bool:
        return self in (VaultRole.OWNER, VaultRole.ADMIN)


class VaultCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    color: str = "bg-blue-500"


class VaultUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None

    def changed_fields(self) -> dict:
        # name and color are required columns; description may be cleared
        fields = self.model_dump(exclude_unset=True)
        return {k: v for k, v in fields.items() if v is not None or k == "description"}


class VaultResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    color: str
    created_by: str
    created_at: datetime

    class Config:
        from_attributes = True


class VaultMemberAdd(BaseModel):
    user_id: str
    role: VaultRole = VaultRole.MEMBER


class VaultMemberResponse(BaseModel):
    vault_id: str
    user_id: str
    role: VaultRole
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VaultView(BaseModel):
    """A vault as seen by one member: the vault, the member's role and its photo count.

    Produced only by the membership resolver, never stored.
    """

    id: str
    name: str
    description: Optional[str] = None
    color: str
    created_by: str
    created_at: datetime
    role: str
    photo_count: int = 0

    model_config = {"frozen": True}
