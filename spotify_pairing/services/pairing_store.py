"""
Process-wide pairing state shared by the HTTP handlers.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from spotify_pairing.clients.json_store import JSONFileStore
from spotify_pairing.models import StoreDocument


class PairingStore:
    """In-memory pairing document guarded by one lock and backed by a file.

    Handlers must run their whole read-modify-write sequence, provider calls
    and the final ``save`` included, inside ``session()``.
    """

    def __init__(self, document: StoreDocument, backend: JSONFileStore) -> None:
        self._document = document
        self._backend = backend
        self._lock = asyncio.Lock()

    @classmethod
    def open(cls, backend: JSONFileStore, *, create_if_missing: bool = False) -> "PairingStore":
        """Load the document from ``backend``; errors propagate to the caller."""
        if create_if_missing and not backend.exists():
            document = StoreDocument()
            backend.save(document)
        else:
            document = backend.load()
        return cls(document, backend)

    @property
    def document(self) -> StoreDocument:
        return self._document

    @asynccontextmanager
    async def session(self) -> AsyncIterator[StoreDocument]:
        async with self._lock:
            yield self._document

    def save(self) -> None:
        """Persist the document. Call while holding ``session()``."""
        self._backend.save(self._document)


__all__ = ["PairingStore"]
