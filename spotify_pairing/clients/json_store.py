"""JSON file persistence for the pairing document."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from spotify_pairing.core.errors import StoreFormatError, StoreIOError
from spotify_pairing.models import StoreDocument

if TYPE_CHECKING:
    from spotify_pairing.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class JSONFileStore:
    """Load and save the whole pairing document as a single JSON file.

    Writes go to a temporary file in the target directory which then replaces
    the store, so a crash mid-write never leaves a truncated document behind.
    """

    def __init__(self, path: str | Path, cipher: Optional[TokenCipherService] = None) -> None:
        self._path = Path(path)
        self._cipher = cipher

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> StoreDocument:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StoreIOError(f"Failed to open store file {self._path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise StoreFormatError(f"Store file {self._path} is not UTF-8 text") from exc

        try:
            document = StoreDocument.model_validate_json(raw)
        except ValidationError as exc:
            raise StoreFormatError(f"Invalid store file {self._path}: {exc}") from exc

        if self._cipher is not None:
            try:
                for user in document.users.values():
                    user.refresh_token = self._cipher.decrypt(user.refresh_token)
                    user.current_token = self._cipher.decrypt(user.current_token)
            except ValueError as exc:
                raise StoreFormatError(str(exc)) from exc

        logger.info("Loaded %d pairings from %s", len(document.users), self._path)
        return document

    def save(self, document: StoreDocument) -> None:
        payload = document.model_dump(mode="json")
        if self._cipher is not None:
            for user in payload["users"].values():
                user["refresh_token"] = self._cipher.encrypt(user["refresh_token"])
                user["current_token"] = self._cipher.encrypt(user["current_token"])

        directory = self._path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=directory, prefix=self._path.name, suffix=".tmp")
        except OSError as exc:
            logger.error("error opening store file %s: %s", self._path, exc)
            raise StoreIOError("Failed to open store file") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp, self._path)
        except OSError as exc:
            logger.error("error writing store file %s: %s", self._path, exc)
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise StoreIOError("Failed to write store file") from exc


__all__ = ["JSONFileStore"]
