from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TENANTGUARD_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = "tenantguard"
    env: str = "dev"

    # Cache store
    cache_backend: str = Field(default="memory", validation_alias="CACHE_BACKEND")
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    # 0 disables the bound (memory backend only)
    cache_max_entries: int = Field(default=10000, ge=0, validation_alias="CACHE_MAX_ENTRIES")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="LOG_JSON")


settings = Settings()
