"""
Configuration and settings for the submission backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Document store (any SQLAlchemy URL; Postgres expected in production)
    database_url: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="QUIZ_USE_IN_MEMORY_BACKENDS"
    )

    # HTTP listener
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")
    cors_origins: list[str] = Field(default=["*"], validation_alias="CORS_ORIGINS")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
