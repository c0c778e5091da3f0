"""
Application configuration helpers.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE")
    extraction_function_url: str | None = Field(None, alias="EXTRACTION_FUNCTION_URL")
    extraction_api_key: str | None = Field(None, alias="EXTRACTION_API_KEY")
    extraction_timeout: float = Field(120.0, alias="EXTRACTION_TIMEOUT")
    storage_url: str | None = Field(None, alias="STORAGE_URL")
    storage_api_key: str | None = Field(None, alias="STORAGE_API_KEY")
    storage_bucket: str = Field("daily-reports", alias="STORAGE_BUCKET")
    local_storage_dir: str = Field("./data/uploads", alias="LOCAL_STORAGE_DIR")
    max_upload_bytes: int = Field(10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    high_confidence_threshold: float = Field(0.85, alias="HIGH_CONFIDENCE_THRESHOLD")
    expose_backend_errors: bool = Field(False, alias="EXPOSE_BACKEND_ERRORS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
