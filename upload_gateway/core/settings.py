# upload_gateway/core/settings.py
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "local"  # local | development | production

    # --- Storage (elke S3-compatibele store: AWS, B2, R2, MinIO) ---
    S3_BUCKET: str = Field("uploads", description="Bucket that receives all uploads")
    S3_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: Optional[str] = None
    S3_ACCESS_KEY_ID: Optional[str] = None
    S3_SECRET_ACCESS_KEY: Optional[str] = None
    S3_FORCE_PATH_STYLE: bool = False
    S3_CONNECT_TIMEOUT: int = 3
    S3_READ_TIMEOUT: int = 10

    # --- Presign / multipart ---
    DEFAULT_EXPIRATION_MINUTES: int = 60
    TRACKER_SHARDS: int = 16

    # --- HTTP ---
    ALLOWED_ORIGINS: list[str] = ["*"]

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings voor dit proces, eenmalig gelezen uit env/.env."""
    s = Settings()
    if s.app_env.lower() == "development":
        s.LOG_LEVEL = "DEBUG"
    return s
