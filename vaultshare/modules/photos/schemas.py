import enum
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class PhotoUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None

    def changed_fields(self) -> dict:
        fields = self.model_dump(exclude_unset=True)
        return {k: v for k, v in fields.items() if v is not None or k == "description"}


class PhotoResponse(BaseModel):
    id: str
    vault_id: str
    uploaded_by: str
    title: str
    description: Optional[str] = None
    file_url: str
    created_at: datetime
    vault_name: Optional[str] = None

    class Config:
        from_attributes = True


class StoredObject(BaseModel):
    key: str
    public_url: str


class UploadStatus(str, enum.Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class UploadCandidate(BaseModel):
    filename: str
    content_type: str
    size: int
    content: bytes = b""
    title: Optional[str] = None
    description: str = ""


class UploadItem(BaseModel):
    id: str
    filename: str
    content_type: str
    size: int
    title: str
    description: str = ""
    status: UploadStatus = UploadStatus.PENDING
    reason: Optional[str] = None
    error_message: Optional[str] = None
    photo: Optional[PhotoResponse] = None
    content: bytes = Field(default=b"", exclude=True, repr=False)


class UploadBatchResult(BaseModel):
    vault_id: str
    items: List[UploadItem]
    all_successful: bool
    message: Optional[str] = None

    @property
    def uploaded(self) -> List[UploadItem]:
        return [i for i in self.items if i.status == UploadStatus.SUCCESS]

    @property
    def failed(self) -> List[UploadItem]:
        return [i for i in self.items if i.status == UploadStatus.FAILED]
