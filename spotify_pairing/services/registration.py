"""
Pairing token issuance, pruning of abandoned registrations and deduplication.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Container, Optional

from spotify_pairing.clients.spotify_auth import SpotifyOAuthClient
from spotify_pairing.core.config import PairingSettings
from spotify_pairing.core.logging import mask_token
from spotify_pairing.models import StoreDocument, UserRecord

logger = logging.getLogger(__name__)


class RegistrationManager:
    """Issues pairing tokens and keeps one durable token per Spotify account."""

    def __init__(
        self,
        pairing_settings: PairingSettings,
        oauth_client: SpotifyOAuthClient,
    ) -> None:
        self._pairing = pairing_settings
        self._oauth = oauth_client

    @property
    def registration_window(self) -> timedelta:
        return timedelta(seconds=self._pairing.registration_timeout_seconds)

    def generate_token(self, existing: Container[str]) -> str:
        """Draw random tokens until one is not already in ``existing``."""
        alphabet = self._pairing.token_alphabet
        while True:
            token = "".join(
                secrets.choice(alphabet) for _ in range(self._pairing.token_length)
            )
            if token not in existing:
                return token

    def prune_timed_out(
        self, document: StoreDocument, now: Optional[datetime] = None
    ) -> list[str]:
        """Drop pending registrations older than the registration window."""
        now = now or datetime.now(timezone.utc)
        window = self.registration_window
        expired = [
            token
            for token, user in document.users.items()
            if user.registration_is_timed_out(now, window)
        ]
        for token in expired:
            del document.users[token]
        if expired:
            logger.info("Pruned %d abandoned registrations", len(expired))
        return expired

    def create_pairing(
        self, document: StoreDocument, now: Optional[datetime] = None
    ) -> tuple[str, str]:
        """
        Insert a pending record under a fresh pairing token.

        Returns a tuple of (pairing_token, authorization_url).
        """
        now = now or datetime.now(timezone.utc)
        self.prune_timed_out(document, now)

        token = self.generate_token(document.users)
        document.users[token] = UserRecord(token_expiry=now)
        logger.info("Issued pairing token %s", mask_token(token))
        return token, self._oauth.build_authorization_url(state=token)

    def deduplicate(self, document: StoreDocument, token: str) -> str:
        """
        Fold a freshly registered record into an older one for the same account.

        Returns the pairing token the client should keep using.
        """
        spotify_id = document.users[token].spotify_id
        if spotify_id is None:
            return token

        existing = document.find_by_spotify_id(spotify_id, exclude=token)
        if existing is None:
            return token

        logger.info(
            "found old token %s for user %s, removing new entry %s",
            mask_token(existing),
            spotify_id,
            mask_token(token),
        )
        document.users[existing] = document.users.pop(token)
        return existing


__all__ = ["RegistrationManager"]
