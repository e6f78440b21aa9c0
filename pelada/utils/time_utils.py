"""
Utility functions for the Pelada session manager.

This module contains clock helpers used throughout the application.
"""
import time
from datetime import datetime, timezone


def now_ts() -> float:
    """
    Get current timestamp in epoch seconds.
    
    Returns:
        Current time as floating point epoch seconds
    """
    return time.time()


def now_iso() -> str:
    """
    Get the current UTC time as an ISO 8601 string.

    Returns:
        Timestamp such as ``2024-05-01T21:30:00.123456+00:00``
    """
    return datetime.now(timezone.utc).isoformat()


def parse_iso(value: str) -> float:
    """
    Convert an ISO 8601 timestamp into epoch seconds.

    Unparseable values sort as the epoch so that ordering never fails.

    Example:
        >>> parse_iso("1970-01-01T00:01:00+00:00")
        60.0
    """
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, TypeError, ValueError):
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()
