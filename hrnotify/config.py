"""Application configuration settings."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./hrnotify.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        default="change-me",
        description="Secret key used to verify the JWT presented by push clients",
        min_length=1,
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending notification emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notification emails",
        min_length=3,
    )
    secondary_channel_enabled: bool = Field(
        default=True,
        description="Whether escalated notifications are also delivered by email",
    )
    sweep_interval_seconds: float = Field(
        default=30.0,
        description="Period of the idle-connection sweep",
        gt=0,
    )
    idle_timeout_seconds: float = Field(
        default=300.0,
        description="Connections inactive for longer than this are evicted by the sweep",
        gt=0,
    )
    heartbeat_interval_seconds: float = Field(
        default=30.0,
        description="Period of keep-alive frames sent to every connection (0 disables them)",
        ge=0,
    )
    push_write_timeout_seconds: float = Field(
        default=5.0,
        description="Upper bound for a single push write before the connection is dropped",
        gt=0,
    )
    connection_ack_timeout_seconds: float = Field(
        default=5.0,
        description="Upper bound for the acknowledgement frame sent right after connecting",
        gt=0,
    )
    notification_retention_days: int = Field(
        default=30,
        description="Read notifications older than this are removed by the cleanup job",
        gt=0,
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the API from a browser",
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def configure_logging(settings: Settings) -> None:
    """Configure the root logger level and format."""

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    logging.getLogger().setLevel(level)


__all__ = ["Settings", "get_settings", "configure_logging"]
