"""
Configuration and settings for the blob admin service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service and the CLI."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/.netlify/functions")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # S3-compatible blob storage
    blob_endpoint: Optional[str] = Field(default=None)
    blob_region: Optional[str] = Field(default=None)
    blob_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Sessions (Redis)
    redis_url: Optional[str] = Field(default=None)
    session_key_prefix: str = Field(default="blob_admin:session:")
    session_ttl_seconds: int = Field(default=86400, ge=60)
    session_cookie_name: str = Field(default="session")

    # Upload client
    client_base_url: str = Field(default="http://localhost:8888")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
