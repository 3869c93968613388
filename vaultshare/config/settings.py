from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_url", "next_public_supabase_url"),
    )
    supabase_anon_key: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_anon_key", "next_public_supabase_anon_key"),
    )
    photos_bucket: str = "photos"
    # False for build/non-interactive contexts: missing credentials fall back to placeholders
    strict_config: bool = True

    # Retry / health probe
    retry_base_delay: float = 1.0  # seconds; delays grow 1x, 2x, 4x, ...
    health_probe_delay: float = 1.0

    # Uploads and storage accounting
    max_upload_mb: int = 10
    per_photo_mb: float = 2.5
    storage_quota_mb: float = 1024

    # App
    app_name: str = "vaultshare"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
