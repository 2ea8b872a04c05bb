"""
Document persisted by the JSON store.
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import BaseModel, Field

from .user import UserRecord


class StoreDocument(BaseModel):
    """All pairings keyed by pairing token."""

    users: Dict[str, UserRecord] = Field(default_factory=dict)

    def find_by_spotify_id(
        self, spotify_id: str, *, exclude: Optional[str] = None
    ) -> Optional[str]:
        """Return the pairing token of a registered record for ``spotify_id``."""
        for token, user in self.users.items():
            if token == exclude or not user.is_registered():
                continue
            if user.spotify_id == spotify_id:
                return token
        return None


__all__ = ["StoreDocument"]
