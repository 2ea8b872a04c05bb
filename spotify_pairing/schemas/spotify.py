"""Schemas for payloads returned by Spotify."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class TokenGrant(BaseModel):
    """Body of a successful response from the accounts token endpoint."""

    access_token: str
    scope: str = Field(..., description="Space separated list of granted scopes.")
    expires_in: int = Field(..., description="Lifetime of access_token in seconds.")
    refresh_token: Optional[str] = Field(
        None, description="Always sent for code exchanges, sometimes on refresh."
    )

    def granted_scopes(self) -> frozenset[str]:
        return frozenset(scope for scope in self.scope.split(" ") if scope)


class SpotifyProfile(BaseModel):
    """Subset of the ``/v1/me`` profile the service relies on."""

    id: str
    display_name: Optional[str] = None


__all__ = ["SpotifyProfile", "TokenGrant"]
