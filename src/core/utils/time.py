"""
Time-related utilities for the application.

Timestamps recorded in metadata and delete confirmations are UTC,
serialized as ISO-8601 with an explicit offset.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Return current UTC time in ISO-8601 format.

    Example:
        2024-01-15T10:42:31.123456+00:00
    """
    return utc_now().isoformat()
