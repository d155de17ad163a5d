"""
FTNed Formatting Utilities

jnode timestamp conversion and helpers for formatting output.
"""

import os
import time
from datetime import datetime
from typing import Optional

# Largest plausible seconds value (2100-01-01); larger values are milliseconds
MAX_SECONDS_TIMESTAMP = 4102444800


def to_unix_time(dt: Optional[datetime] = None) -> int:
    """
    Convert a datetime to a jnode timestamp.

    jnode stores milliseconds since epoch (Java convention).

    Args:
        dt: Time to convert, defaults to now
    """
    if dt is None:
        return int(time.time() * 1000)
    return int(dt.timestamp() * 1000)


def from_unix_time(timestamp: int) -> datetime:
    """
    Convert a stored timestamp to a datetime.

    Accepts both seconds and milliseconds.
    """
    if timestamp > MAX_SECONDS_TIMESTAMP:
        return datetime.fromtimestamp(timestamp / 1000)
    return datetime.fromtimestamp(timestamp)


def format_timestamp(dt: Optional[datetime]) -> str:
    """
    Format a message date.

    Returns:
        Formatted string like "10 Dec 25 14:32:15"
    """
    if not dt:
        return "Never"
    return dt.strftime("%d %b %y %H:%M:%S")


def mask_dsn(dsn: str) -> str:
    """
    Hide the password in a DSN before logging it.

    "user:secret@tcp(host)/db" -> "user:***@tcp(host)/db";
    long SQLite paths are shortened to their file name.
    """
    if len(dsn) <= 20:
        return dsn

    head, sep, tail = dsn.rpartition("@")
    if sep:
        scheme, slashes, creds = head.rpartition("://")
        user, colon, _ = creds.partition(":")
        if colon:
            return f"{scheme}{slashes}{user}:***@{tail}"

    if dsn.endswith(".db"):
        return ".../" + os.path.basename(dsn)

    return dsn


def truncate(text: str, max_length: int = 50, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def pad_right(text: str, width: int) -> str:
    """Pad text to width with spaces on the right."""
    return text.ljust(width)[:width]


def pad_left(text: str, width: int) -> str:
    """Pad text to width with spaces on the left."""
    return text.rjust(width)[:width]
