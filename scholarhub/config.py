"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

NOTIFICATION_CHANNELS = ("database", "broadcast", "push")


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
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone (or UTC offset) used for stored timestamps",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the API from a browser",
    )
    notification_channels: list[str] = Field(
        default_factory=lambda: list(NOTIFICATION_CHANNELS),
        description="Delivery channels used by the notification dispatcher, in order",
    )
    broadcast_channel_prefix: str = Field(
        default="private-notifications",
        description="Prefix of the private per-recipient broadcast channel",
        min_length=1,
    )
    push_icon: str = Field(
        default="/images/notification-icon.png",
        description="Icon shown by the browser for push messages",
    )
    push_ttl: int = Field(
        default=1000,
        description="Seconds the push service keeps an undelivered message",
        gt=0,
    )
    firebase_credentials: str | None = Field(
        default=None,
        description="Service account file path or JSON document for Firebase Cloud Messaging",
    )

    @field_validator("notification_channels")
    @classmethod
    def _validate_channels(cls, value: list[str]) -> list[str]:
        unknown = [channel for channel in value if channel not in NOTIFICATION_CHANNELS]
        if unknown:
            raise ValueError(
                "Unknown notification channels: " + ", ".join(sorted(set(unknown)))
            )
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["NOTIFICATION_CHANNELS", "Settings", "get_settings", "reset_settings_cache"]
