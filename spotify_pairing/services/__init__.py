"""Service layer exports."""

from .pairing_store import PairingStore
from .registration import RegistrationManager
from .token_cipher import TokenCipherService
from .user_tokens import UserTokenService

__all__ = [
    "PairingStore",
    "RegistrationManager",
    "TokenCipherService",
    "UserTokenService",
]
