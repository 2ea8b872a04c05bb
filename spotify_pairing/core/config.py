"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app and the operator scripts
share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from string import ascii_letters, digits
from typing import Annotated, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


DEFAULT_SCOPES = (
    "user-read-playback-state",
    "user-read-currently-playing",
    "user-modify-playback-state",
)


class SpotifySettings(BaseSettings):
    """Client credentials and OAuth parameters for the Spotify integration."""

    client_id: str = Field(..., validation_alias="SPOTIFY_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="SPOTIFY_CLIENT_SECRET")
    redirect_uri: AnyHttpUrl = Field(
        "https://espremote.cf/callback", validation_alias="SPOTIFY_REDIRECT_URI"
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        DEFAULT_SCOPES,
        validation_alias="SPOTIFY_SCOPES",
        description="Scopes requested at authorization and required on every grant.",
    )
    http_timeout_seconds: float = Field(10.0, validation_alias="SPOTIFY_HTTP_TIMEOUT")

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class PairingSettings(BaseSettings):
    """Pairing token shape and the pending registration window."""

    token_length: int = Field(16, ge=1, validation_alias="PAIRING_TOKEN_LENGTH")
    token_alphabet: str = Field(
        ascii_letters + digits,
        min_length=2,
        validation_alias="PAIRING_TOKEN_ALPHABET",
    )
    registration_timeout_seconds: int = Field(
        30,
        ge=0,
        validation_alias="PAIRING_REGISTRATION_TIMEOUT",
        description="Seconds a pending registration survives before it may be pruned.",
    )


class StorageSettings(BaseSettings):
    """Location of the JSON document holding every pairing."""

    path: Path = Field(Path("/etc/esp_spotify.json"), validation_alias="PAIRING_STORE_PATH")
    create_if_missing: bool = Field(
        False,
        validation_alias="PAIRING_STORE_CREATE",
        description="Write an empty store at startup instead of refusing to start.",
    )


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    host: str = Field("0.0.0.0", validation_alias="APP_HOST")
    port: int = Field(8000, validation_alias="APP_PORT")
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    pairing: PairingSettings = Field(default_factory=PairingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "DEFAULT_SCOPES",
    "PairingSettings",
    "SecuritySettings",
    "SpotifySettings",
    "StorageSettings",
    "get_settings",
]
