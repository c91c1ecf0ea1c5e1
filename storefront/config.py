"""Application configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    telegram_bot_token: str
    owner_telegram_ids: Annotated[list[int], NoDecode] = []

    # SQLite file; empty means storage default (data/storefront.sqlite3)
    db_path: str = ""

    log_level: str = "INFO"
    timezone: str = "Africa/Algiers"

    # Cosmetic pause before the order confirmation is revealed
    confirmation_hold_seconds: float = 5.0

    # Meta Conversions API (optional)
    fb_pixel_id: str | None = None
    fb_access_token: str | None = None
    fb_test_event_code: str | None = None

    @field_validator("owner_telegram_ids", mode="before")
    @classmethod
    def parse_owner_ids(cls, v: str | list[int] | int) -> list[int]:
        """Parse comma-separated string of IDs into list of integers."""
        if isinstance(v, list):
            return v
        if isinstance(v, int):
            return [v]
        if isinstance(v, str) and v.strip():
            return [int(id_.strip()) for id_ in v.split(",") if id_.strip()]
        return []

    def pixel_enabled(self) -> bool:
        return bool(self.fb_pixel_id and self.fb_access_token)

    def is_owner(self, user_id: int) -> bool:
        return user_id in self.owner_telegram_ids


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
