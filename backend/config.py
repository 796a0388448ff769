"""
Configuration and settings for the calculation service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Database (Postgres expected), read from DATABASE_URL
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "CALC_USE_IN_MEMORY_BACKENDS", "use_in_memory_backends"
        ),
    )

    # Commit queue (Redis), read from REDIS_URL / REDIS_QUEUE_KEY
    redis_url: Optional[str] = Field(default=None)
    redis_queue_key: str = Field(default="calc:history")

    # Persist queued commits right after the response instead of in a worker.
    drain_commits_inline: bool = Field(default=True)

    history_page_size: int = Field(default=50, ge=1, le=500)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
