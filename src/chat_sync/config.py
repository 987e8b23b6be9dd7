"""Configuration and environment loading for chat-sync."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_profile_store_path() -> Path:
    return Path.home() / ".config" / "chat-sync" / "profiles.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CHAT_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote service
    api_base_url: str = "https://api.v0.dev/v1"
    request_timeout: float = 30.0
    scope_header: str = "x-scope"

    # Legacy single credential (used when no profile is active)
    api_key: str | None = None
    default_scope: str | None = None

    # Local storage
    profile_store_path: Path = _default_profile_store_path()

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
