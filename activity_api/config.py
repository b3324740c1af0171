"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key used to verify the signature of bearer tokens",
        min_length=1,
    )
    token_algorithm: str = Field(
        default="HS256", description="JWT signing algorithm expected on bearer tokens"
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before tokens minted by local tooling expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to store timestamps and bucket hourly/daily histograms",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    session_inactivity_minutes: int = Field(
        default=30,
        description="Inactivity gap that closes a reconstructed session",
        gt=0,
    )
    engagement_window_days: int = Field(
        default=30,
        description="Trailing window covered by engagement summaries",
        gt=0,
    )
    max_batch_size: int = Field(
        default=500, description="Maximum number of items accepted per batch", gt=0
    )
    max_metadata_entries: int = Field(
        default=32,
        description="Maximum number of keys allowed in ``action.metadata``",
        gt=0,
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
