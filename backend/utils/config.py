"""Application configuration utilities."""

from __future__ import annotations

import base64
import logging
import os
from functools import lru_cache
from typing import Any, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.utils.errors import ConfigurationError, CredentialsError

LOGGER = logging.getLogger(__name__)

PRODUCTION_ENV = "production"
PRIMARY_ENV_FILE = ".env"
FALLBACK_ENV_FILE = "config.env"


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=PRIMARY_ENV_FILE,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    app_name: str = Field(
        default="Appointment Scheduling Bot",
    )
    app_version: str = Field(
        default="0.1.0",
    )
    log_level: str = Field(
        default="INFO",
    )

    app_env: str = Field(
        default="development",
    )
    http_host: str = Field(
        default="0.0.0.0",
    )
    http_port: str = Field(
        default="8080",
    )
    tz: str = Field(
        default="UTC",
    )

    # Google Calendar
    gcal_calendar_id: str = Field(
        default="",
    )
    google_creds_json: str = Field(
        default="",
        repr=False,
    )

    # Supabase
    supabase_url: str = Field(
        default="",
    )
    supabase_key: str = Field(
        default="",
        repr=False,
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379",
    )

    @property
    def is_production(self) -> bool:
        return self.app_env == PRODUCTION_ENV

    @property
    def has_google_credentials(self) -> bool:
        return bool(self.google_creds_json)

    def validate_required(self) -> None:
        """Enforce production-only required fields.

        Outside of production every field is optional and this is a no-op.
        """

        if not self.is_production:
            return

        if not self.gcal_calendar_id:
            raise ConfigurationError("GCAL_CALENDAR_ID is required in production")
        if not self.google_creds_json:
            raise ConfigurationError("GOOGLE_CREDS_JSON is required in production")


def env_file_candidates() -> Tuple[str, ...]:
    """Return the local overlay file to load: ``.env``, else ``config.env``."""

    if os.path.exists(PRIMARY_ENV_FILE):
        return (PRIMARY_ENV_FILE,)
    return (FALLBACK_ENV_FILE,)


def load_settings(validate: bool = True, **overrides: Any) -> Settings:
    """Resolve settings from the overlay file and the environment.

    Raises ``ConfigurationError`` when running in production without the
    calendar id or credentials, unless ``validate`` is false.
    """

    env_files = env_file_candidates()
    LOGGER.debug("Loading settings with env_file=%s", env_files[0])

    settings = Settings(_env_file=env_files, **overrides)
    if validate:
        settings.validate_required()
    return settings


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return load_settings()


def resolve_credential_bytes(settings: Settings) -> bytes:
    """Return the Google service account document referenced by settings.

    ``GOOGLE_CREDS_JSON`` is tried, in order, as standard base64, as a path to
    an existing file, and finally as inline JSON text. A value that is both a
    valid base64 string and an existing path is decoded as base64.
    """

    raw = settings.google_creds_json
    if not raw:
        raise CredentialsError("no Google credentials provided")

    try:
        # Line breaks are skipped so wrapped `base64` output decodes.
        decoded = base64.b64decode(raw.replace("\r", "").replace("\n", ""), validate=True)
    except ValueError:
        pass
    else:
        LOGGER.debug("Google credentials resolved from base64 value")
        return decoded

    if os.path.isfile(raw):
        LOGGER.debug("Google credentials resolved from file %s", raw)
        with open(raw, "rb") as handle:
            return handle.read()

    LOGGER.debug("Google credentials resolved from inline value")
    return raw.encode("utf-8")
