"""
Spotify OAuth utilities.

These helpers build the consent URL, exchange authorization codes and refresh
tokens, and read the profile of the authorized account.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Optional, Type, TypeVar
from urllib.parse import quote, urlencode

import httpx
from pydantic import BaseModel, ValidationError

from spotify_pairing.core.config import SpotifySettings
from spotify_pairing.core.errors import NetworkError, ParseError, ProviderError
from spotify_pairing.schemas import SpotifyProfile, TokenGrant

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class SpotifyOAuthClient:
    """Build Spotify authorization URLs and talk to the accounts and Web APIs."""

    AUTH_BASE_URL = "https://accounts.spotify.com/authorize"
    TOKEN_URL = "https://accounts.spotify.com/api/token"
    PROFILE_URL = "https://api.spotify.com/v1/me"

    def __init__(
        self,
        spotify_settings: SpotifySettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._spotify = spotify_settings
        self._transport = transport

    @property
    def required_scopes(self) -> frozenset[str]:
        return frozenset(self._spotify.scopes)

    def build_authorization_url(self, state: str) -> str:
        """Construct the Spotify consent URL for a pairing token."""
        params = {
            "client_id": self._spotify.client_id,
            "response_type": "code",
            "redirect_uri": str(self._spotify.redirect_uri),
            "scope": " ".join(self._spotify.scopes),
            "state": state,
            "show_dialog": "false",
        }
        query = urlencode(params, quote_via=quote)
        return f"{self.AUTH_BASE_URL}?{query}"

    async def exchange_authorization_code(self, code: str) -> TokenGrant:
        """Exchange an authorization code for an access/refresh token pair."""
        payload = {
            "client_id": self._spotify.client_id,
            "client_secret": self._spotify.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": str(self._spotify.redirect_uri),
        }
        response = await self._send("POST", self.TOKEN_URL, data=payload)
        return self._parse(response, TokenGrant)

    async def refresh_access_token(self, refresh_token: str) -> TokenGrant:
        """Obtain a new access token using a stored refresh token."""
        payload = {
            "client_id": self._spotify.client_id,
            "client_secret": self._spotify.client_secret,
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        response = await self._send("POST", self.TOKEN_URL, data=payload)
        return self._parse(response, TokenGrant)

    async def fetch_profile(self, access_token: str) -> SpotifyProfile:
        response = await self._send(
            "GET",
            self.PROFILE_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return self._parse(response, SpotifyProfile)

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self._spotify.http_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise NetworkError() from exc

        if response.status_code != HTTPStatus.OK:
            logger.warning(
                "Spotify answered %s with %s: %s", url, response.status_code, response.text
            )
            raise ProviderError(f"Spotify error: {response.text}")
        return response

    @staticmethod
    def _parse(response: httpx.Response, model: Type[_ModelT]) -> _ModelT:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ParseError() from exc


__all__ = ["SpotifyOAuthClient"]
