"""
FTNed Text Helpers

Line-ending and character set conversion shared by area backends.
"""

import codecs
import logging

logger = logging.getLogger(__name__)

UTF8 = "UTF-8"

# FTN CHRS names that differ from Python codec names
_CHRS_ALIASES = {
    "IBMPC": "cp437",
    "IBM437": "cp437",
    "IBM866": "cp866",
    "ALT": "cp866",
    "LATIN-1": "latin-1",
    "LATIN-2": "iso8859-2",
    "LATIN-5": "iso8859-9",
}


def charset_name(chrs: str) -> str:
    """
    Return the charset part of a CHRS value.

    Args:
        chrs: CHRS kludge value like "CP866 2"

    Returns:
        Charset name like "CP866", or "UTF-8" when empty
    """
    parts = chrs.split() if chrs else []
    return parts[0] if parts else UTF8


def is_utf8(chrs: str) -> bool:
    """Check if a CHRS value names UTF-8."""
    return charset_name(chrs).upper().replace("_", "-") in ("UTF-8", "UTF8")


def encode_charmap(text: str, chrs: str) -> str:
    """
    Re-encode text for a display charset.

    Characters the charset cannot represent are replaced with '?'.
    Unknown charsets leave the text unchanged.
    """
    name = charset_name(chrs)
    codec = _CHRS_ALIASES.get(name.upper(), name.lower())
    try:
        codecs.lookup(codec)
    except LookupError:
        logger.warning(f"Unknown charset {name!r}, leaving text unconverted")
        return text
    return text.encode(codec, errors="replace").decode(codec)


def normalize_for_storage(body: str, line_ending: str = "\n") -> str:
    """Convert FTN CR line endings for storage, with one trailing line ending."""
    result = body.replace("\r", line_ending)
    return result.rstrip(line_ending) + line_ending


def normalize_from_storage(body: str, line_ending: str = "\n") -> str:
    """Convert stored line endings back to FTN CR."""
    return body.replace(line_ending, "\r")
