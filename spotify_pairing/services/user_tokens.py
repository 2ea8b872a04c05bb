"""
Helpers for obtaining and refreshing the Spotify tokens of a user record.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from spotify_pairing.clients.spotify_auth import SpotifyOAuthClient
from spotify_pairing.core.errors import (
    MissingRefreshTokenError,
    NotRegisteredError,
    ScopeError,
)
from spotify_pairing.models import UserRecord
from spotify_pairing.schemas import TokenGrant

logger = logging.getLogger(__name__)


class UserTokenService:
    """Runs the code exchange and refresh lifecycle for a ``UserRecord``."""

    def __init__(self, oauth_client: SpotifyOAuthClient) -> None:
        self._oauth = oauth_client

    def _check_scopes(self, grant: TokenGrant) -> None:
        granted = grant.granted_scopes()
        required = self._oauth.required_scopes
        if granted != required:
            logger.warning(
                "Scope mismatch: granted=%s required=%s", sorted(granted), sorted(required)
            )
            raise ScopeError()

    async def register(self, record: UserRecord, code: str) -> None:
        """
        Complete a pending registration with an authorization code.

        The record is only modified once the token exchange and the profile
        lookup both succeeded, so a failure leaves it pending.
        """
        requested_at = datetime.now(timezone.utc)
        grant = await self._oauth.exchange_authorization_code(code)
        self._check_scopes(grant)
        if not grant.refresh_token:
            raise MissingRefreshTokenError()

        profile = await self._oauth.fetch_profile(grant.access_token)

        record.current_token = grant.access_token
        record.token_expiry = requested_at + timedelta(seconds=grant.expires_in)
        record.refresh_token = grant.refresh_token
        record.spotify_id = profile.id
        logger.info("Registered Spotify user %s", profile.id)

    async def get_valid_token(
        self, record: UserRecord, now: Optional[datetime] = None
    ) -> str:
        """Return an unexpired access token, refreshing it when necessary."""
        if not record.is_registered():
            raise NotRegisteredError()

        now = now or datetime.now(timezone.utc)
        if record.current_token is not None and now < record.token_expiry:
            return record.current_token

        logger.info("token has expired for user %s, refreshing...", record.spotify_id)
        grant = await self._oauth.refresh_access_token(record.refresh_token)
        self._check_scopes(grant)

        record.current_token = grant.access_token
        record.token_expiry = now + timedelta(seconds=grant.expires_in)
        if grant.refresh_token:
            record.refresh_token = grant.refresh_token
        return record.current_token


__all__ = ["UserTokenService"]
