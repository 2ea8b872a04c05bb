"""Public schema exports."""

from .spotify import SpotifyProfile, TokenGrant

__all__ = ["SpotifyProfile", "TokenGrant"]
