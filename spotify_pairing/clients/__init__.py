"""Expose constructed client wrappers."""

from .json_store import JSONFileStore
from .spotify_auth import SpotifyOAuthClient

__all__ = [
    "JSONFileStore",
    "SpotifyOAuthClient",
]
