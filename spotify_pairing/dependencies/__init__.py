"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    build_json_store,
    build_token_cipher,
    get_app_settings,
    get_pairing_store,
    get_registration_manager,
    get_spotify_oauth_client,
    get_user_token_service,
)

__all__ = [
    "build_json_store",
    "build_token_cipher",
    "get_app_settings",
    "get_pairing_store",
    "get_registration_manager",
    "get_spotify_oauth_client",
    "get_user_token_service",
]
