"""FTNed CLI Module - Non-interactive commands."""
