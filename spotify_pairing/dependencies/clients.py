"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Request

from spotify_pairing.clients import JSONFileStore, SpotifyOAuthClient
from spotify_pairing.core.config import AppSettings, SecuritySettings, get_settings
from spotify_pairing.services import (
    PairingStore,
    RegistrationManager,
    TokenCipherService,
    UserTokenService,
)


@lru_cache()
def _settings() -> AppSettings:
    """Internal helper to cache settings for client factories."""
    return get_settings()


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return _settings()


@lru_cache()
def get_spotify_oauth_client() -> SpotifyOAuthClient:
    """Create a singleton Spotify OAuth client."""
    return SpotifyOAuthClient(_settings().spotify)


def build_token_cipher(security: SecuritySettings) -> Optional[TokenCipherService]:
    """Provide the at-rest token cipher when an encryption secret is configured."""
    if not security.token_encryption_secret:
        return None
    return TokenCipherService(secret=security.token_encryption_secret)


def build_json_store(settings: AppSettings) -> JSONFileStore:
    """Create the file backend described by ``settings``."""
    return JSONFileStore(settings.storage.path, cipher=build_token_cipher(settings.security))


def get_pairing_store(request: Request) -> PairingStore:
    """Return the store owned by the running application."""
    return request.app.state.pairing_store


def get_registration_manager(
    oauth_client: Annotated[SpotifyOAuthClient, Depends(get_spotify_oauth_client)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> RegistrationManager:
    """Build a registration manager bound to the configured pairing policy."""
    return RegistrationManager(settings.pairing, oauth_client)


def get_user_token_service(
    oauth_client: Annotated[SpotifyOAuthClient, Depends(get_spotify_oauth_client)],
) -> UserTokenService:
    """Build the token lifecycle helper."""
    return UserTokenService(oauth_client)


__all__ = [
    "build_json_store",
    "build_token_cipher",
    "get_app_settings",
    "get_pairing_store",
    "get_registration_manager",
    "get_spotify_oauth_client",
    "get_user_token_service",
]
