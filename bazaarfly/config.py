"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str = Field(
        default="sqlite:///./bazaarfly.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    email_host: str | None = Field(
        default=None, description="SMTP server host used for transactional email"
    )
    email_port: int | None = Field(
        default=None, description="SMTP server port (465 enables implicit SSL)", gt=0
    )
    email_user: str | None = Field(
        default=None,
        description="SMTP username, also used as the sender address",
    )
    email_password: str | None = Field(
        default=None,
        description="SMTP password for ``email_user`` (EMAIL_PASS or EMAIL_PASSWORD)",
        validation_alias=AliasChoices("EMAIL_PASS", "EMAIL_PASSWORD", "email_password"),
    )
    email_from_name: str = Field(
        default="Bazaarfly",
        description="Display name shown in the From header of outgoing email",
        min_length=1,
    )
    email_timeout_seconds: float = Field(
        default=30.0,
        description="Socket timeout applied to every SMTP operation",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used when stamping notification records",
    )
    notification_page_size: int = Field(
        default=20,
        description="Default number of notifications returned per page",
        gt=0,
        le=100,
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
