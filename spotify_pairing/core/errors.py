"""
Error kinds raised by the pairing service.

Every error carries the HTTP status it is reported with and a plain-text
message that is returned to the caller verbatim.
"""

from __future__ import annotations

from http import HTTPStatus


class PairingError(Exception):
    """Base class for errors surfaced to HTTP callers."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class StoreIOError(PairingError):
    """The store file could not be opened, read or written."""

    default_message = "Failed to access the store file"


class StoreFormatError(PairingError):
    """The store file does not contain a valid pairing document."""

    default_message = "Store file is not a valid pairing document"


class NetworkError(PairingError):
    """A request to Spotify could not be sent or completed."""

    default_message = "Failed to send request to Spotify"


class ParseError(PairingError):
    """Spotify answered with a body that does not have the expected shape."""

    default_message = "Failed to parse JSON response from Spotify"


class ProviderError(PairingError):
    """Spotify reported a failure of its own."""

    default_message = "Spotify error"


class ScopeError(PairingError):
    """The granted scopes differ from the required scope set."""

    default_message = "Incorrect scopes provided by Spotify"


class MissingRefreshTokenError(PairingError):
    default_message = "No refresh token provided by Spotify"


class NotFoundError(PairingError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "User not found"


class AlreadyRegisteredError(PairingError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "User is already registered"


class NotRegisteredError(PairingError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "User isn't registered"


class ProviderDeniedError(PairingError):
    """The user declined consent on the Spotify authorization page."""

    status_code = HTTPStatus.BAD_REQUEST
    default_message = "You didn't accept."


__all__ = [
    "AlreadyRegisteredError",
    "MissingRefreshTokenError",
    "NetworkError",
    "NotFoundError",
    "NotRegisteredError",
    "PairingError",
    "ParseError",
    "ProviderDeniedError",
    "ProviderError",
    "ScopeError",
    "StoreFormatError",
    "StoreIOError",
]
