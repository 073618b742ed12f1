"""Settings for tmsync.

Values come from ``TMSYNC_*`` environment variables or a local ``.env``
file, falling back to the defaults below.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "https://transfermarkt-api.fly.dev"

# Sweep intervals offered to operators, in seconds.
UPDATE_INTERVALS: dict[int, str] = {
    3600: "Hourly",
    21600: "Every 6 hours",
    43200: "Every 12 hours",
    86400: "Daily",
    604800: "Weekly",
}


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_prefix="TMSYNC_", env_file=".env", extra="ignore")

    # API
    api_base_url: str = DEFAULT_API_BASE_URL
    request_interval: float = Field(default=1.0, ge=0.0, description="Seconds between requests")
    probe_timeout: float = Field(default=5.0, gt=0.0)
    request_timeout: float = Field(default=30.0, gt=0.0)

    # Periodic sweeps
    update_interval: int = 86400
    update_players: bool = True
    update_teams: bool = True
    update_competitions: bool = True

    # Storage
    database_path: str = "data/catalog.db"
    asset_root: str = "data/files"

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("api_base_url cannot be empty")
        return v

    @field_validator("update_interval")
    @classmethod
    def known_interval(cls, v: int) -> int:
        if v not in UPDATE_INTERVALS:
            allowed = ", ".join(str(k) for k in UPDATE_INTERVALS)
            raise ValueError(f"update_interval must be one of {allowed}")
        return v
