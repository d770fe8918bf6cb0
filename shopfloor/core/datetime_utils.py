"""Centralized datetime utilities for consistent timezone handling.

Timestamps are naive UTC, matching what the stored procedures exchange.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current UTC time as naive datetime.

    Replaces deprecated datetime.utcnow().
    """
    return datetime.now(UTC).replace(tzinfo=None)
