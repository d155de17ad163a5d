"""FTNed Editor Module - Quote detection and reflow."""

from .quote import (
    is_quote_char,
    is_quote_basic,
    is_quote_enhanced,
    get_quote_string,
    get_quote_level,
    should_eliminate_quote,
    word_wrap_quote_aware,
    can_reflow_quoted_lines,
    quote_text,
)

__all__ = [
    "is_quote_char",
    "is_quote_basic",
    "is_quote_enhanced",
    "get_quote_string",
    "get_quote_level",
    "should_eliminate_quote",
    "word_wrap_quote_aware",
    "can_reflow_quoted_lines",
    "quote_text",
]
