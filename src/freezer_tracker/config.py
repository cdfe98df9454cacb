"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_base_url: str = "https://api.jsonstorage.net/v1/json"
    storage_retry_attempts: int = 3
    storage_retry_backoff_seconds: float = 0.3
    storage_timeout_seconds: float = 15
    session_config_path: Path = Path("~/.freezer_tracker/session.json")
    freshness_horizon_days: int = 180
    log_level: str = "INFO"
    allowed_users: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_users(raw: str | None) -> set[str] | None:
    """Parse the allowed acting users from env, case-insensitively."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    users: set[str] = set()
    for chunk in cleaned.split(","):
        value = chunk.strip().lower()
        if value:
            users.add(value)
    return users or None
