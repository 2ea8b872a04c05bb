"""
Domain model for one paired Spotify account.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import AwareDatetime, BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRecord(BaseModel):
    """Credential state stored under a pairing token.

    A record without a refresh token is a pending registration; in that state
    ``token_expiry`` holds the moment the pairing token was issued.
    """

    refresh_token: Optional[str] = None
    current_token: Optional[str] = None
    token_expiry: AwareDatetime = Field(
        default_factory=_utcnow,
        description="When current_token stops being valid.",
    )
    spotify_id: Optional[str] = Field(
        None, description="Spotify account id, set once authorization succeeds."
    )

    def is_registered(self) -> bool:
        return self.refresh_token is not None

    def registration_is_timed_out(self, now: datetime, window: timedelta) -> bool:
        """True once a pending registration has outlived ``window``."""
        return not self.is_registered() and now - self.token_expiry > window


__all__ = ["UserRecord"]
