from pydantic import BaseModel


class StorageEstimate(BaseModel):
    used_mb: float
    total_mb: float
    used_percentage: float
    available_mb: float


class DashboardStats(BaseModel):
    total_photos: int
    total_vaults: int
    recent_uploads: int
    storage: StorageEstimate
