from pydantic import BaseModel
from typing import Optional
from datetime import datetime

PREFERENCE_FLAGS = ("notifications_enabled", "email_updates_enabled", "two_factor_enabled")


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    bio: Optional[str] = None
    gender: Optional[str] = None
    avatar_url: Optional[str] = None
    notifications_enabled: Optional[bool] = None
    email_updates_enabled: Optional[bool] = None
    two_factor_enabled: Optional[bool] = None

    def changed_fields(self) -> dict:
        # Text columns may be cleared with null; the preference flags may not
        fields = self.model_dump(exclude_unset=True)
        return {k: v for k, v in fields.items() if v is not None or k not in PREFERENCE_FLAGS}


class ProfileResponse(BaseModel):
    id: str
    full_name: Optional[str] = None
    phone_number: Optional[str] = None
    bio: Optional[str] = None
    gender: Optional[str] = None
    avatar_url: Optional[str] = None
    notifications_enabled: bool = True
    email_updates_enabled: bool = False
    two_factor_enabled: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
