"""FTNed Utilities Module."""

from .formatting import to_unix_time, from_unix_time, format_timestamp, mask_dsn

__all__ = ["to_unix_time", "from_unix_time", "format_timestamp", "mask_dsn"]
