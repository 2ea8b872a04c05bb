"""Domain model exports."""

from .store import StoreDocument
from .user import UserRecord

__all__ = ["StoreDocument", "UserRecord"]
