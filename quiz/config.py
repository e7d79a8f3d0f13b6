"""
Configuration for the quiz client.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QuizSettings(BaseSettings):
    """Environment-backed settings, read from ``QUIZ_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUIZ_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Local key-value store (JSON file); ignored when redis_url is set.
    store_path: str = Field(default="data/quiz_store.json")
    redis_url: Optional[str] = Field(default=None)
    redis_namespace: str = Field(default="blindl:")

    # Submission backend; leave unset to keep submissions local only.
    api_base_url: Optional[str] = Field(default=None)
    request_timeout_seconds: float = Field(default=10.0)

    auto_advance_delay_seconds: float = Field(default=0.3, ge=0)
    verification_delay_seconds: float = Field(default=1.0, ge=0)


@lru_cache(maxsize=1)
def get_quiz_settings() -> QuizSettings:
    """Return cached settings instance."""
    return QuizSettings()
