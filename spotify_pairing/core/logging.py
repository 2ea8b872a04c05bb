"""
Logging utilities for the pairing service and its operator scripts.

Provides a consistent logging format and configuration.
"""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # httpx logs every request at INFO, including bearer-authorized profile calls.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def mask_token(token: str, visible: int = 4) -> str:
    """Shorten a pairing token so it can appear in log lines."""
    return f"{token[:visible]}..."


__all__ = ["configure_logging", "mask_token"]
