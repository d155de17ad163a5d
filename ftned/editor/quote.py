"""
FTNed Quote Handling

Quote line detection and quote-aware word wrapping, following the
GoldED+ is_quote()/is_quote2() heuristics so that citations stay
compatible with other FTN editors. All scanning is per character
(code point), never per byte.
"""

import unicodedata
from typing import Optional, Sequence

QUOTE_STOPS = "<\"'-"
MAX_QUOTE_LEN = 40
BASIC_SCAN_LIMIT = 11  # 10 characters + 1

CTRL_A = "\x01"

# Separators that str.isspace() accepts but FTN editors treat as text
_NOT_SPACE = "\x1c\x1d\x1e\x1f"


def _is_space(ch: str) -> bool:
    return ch.isspace() and ch not in _NOT_SPACE


def _is_control(ch: str) -> bool:
    return unicodedata.category(ch) == "Cc"


def is_quote_char(ch: str) -> bool:
    """Only '>' marks a quote."""
    return ch == ">"


def is_quote_basic(line: str) -> bool:
    """
    Basic quote test: a '>' within the first few characters.

    Leading whitespace is skipped, then a short run of ordinary characters
    (initials) may precede the '>'. Control characters, whitespace and the
    stop characters end the run.
    """
    if not line:
        return False

    length = len(line)
    end = min(length, BASIC_SCAN_LIMIT)

    ptr = 0
    while ptr < length and _is_space(line[ptr]):
        ptr += 1

    if ptr >= length or ptr >= end:
        return False

    if is_quote_char(line[ptr]):
        return True

    while ptr < length and ptr < end:
        ch = line[ptr]
        if is_quote_char(ch):
            return True
        if _is_control(ch) or ch in QUOTE_STOPS or _is_space(ch):
            break
        ptr += 1

    return ptr < end and ptr < length and is_quote_char(line[ptr])


def is_quote_enhanced(line: str, prev_lines: Optional[Sequence[str]] = None) -> bool:
    """
    Decide whether a line is quoted text.

    Args:
        line: Line to classify
        prev_lines: Preceding lines of the message, oldest first

    Returns:
        True if the line should be treated as a quote
    """
    if not line:
        return False

    length = len(line)
    head = 0
    while head < length and _is_space(line[head]):
        head += 1

    if head >= length:
        return False

    # First '>' before CR, LF or a stop character
    found = False
    pos = head
    while pos < length and not found:
        ch = line[pos]
        if is_quote_char(ch):
            found = True
        elif ch in QUOTE_STOPS or ch == "\r" or ch == "\n":
            return True
        pos += 1

    if not found:
        return False

    # pos is one past the '>'
    if pos < length and is_quote_basic(line[pos:]):
        return True

    # "SPACE*[a-zA-Z]{0,3}>"
    alpha = sum(1 for ch in line[head:pos - 1] if ch.isalpha())
    if alpha < 4 and alpha == pos - 1 - head:
        return True

    return _quote_context(prev_lines or [])


def _quote_context(prev_lines: Sequence[str]) -> bool:
    """Look back through previous lines for evidence of a citation block."""
    if not prev_lines:
        return True

    paragraph = False

    for i in range(len(prev_lines) - 1, -1, -1):
        line = prev_lines[i]

        if is_quote_basic(line):
            return True

        if not line or line[0] in "\r\n":
            if paragraph:
                return True
            paragraph = True
            continue

        if line[0] == CTRL_A:
            return True

        last_lt = line.rfind("<")
        if last_lt != -1:
            if ">" in line[last_lt:]:
                return True
            for later in prev_lines[i + 1:]:
                if ">" in later:
                    return True
            return False

    return True


def get_quote_string(line: str) -> tuple[str, int]:
    """
    Extract the quote marker from a line.

    The marker runs from the start of the line through the '>' run and
    one following space, e.g. " JD> ". Line feeds are dropped and the
    marker is capped at MAX_QUOTE_LEN - 1 characters.

    Returns:
        (marker, length), or ("", 0) if the line is not quoted
    """
    if not is_quote_basic(line):
        return "", 0

    length = len(line)
    start = 0
    while start < length and _is_space(line[start]):
        start += 1

    while start < length and not is_quote_char(line[start]):
        start += 1

    if start >= length:
        return "", 0

    end = start
    while end < length and is_quote_char(line[end]):
        end += 1

    if end < length and _is_space(line[end]):
        end += 1

    chars = []
    for ch in line[:end]:
        if len(chars) >= MAX_QUOTE_LEN - 1:
            break
        if ch != "\n":
            chars.append(ch)

    marker = "".join(chars)
    return marker, len(marker)


def get_quote_level(line: str) -> int:
    """Nesting depth of a quoted line (number of '>' in its marker)."""
    marker, _ = get_quote_string(line)
    return sum(1 for ch in marker if is_quote_char(ch))


def should_eliminate_quote(line: str, cursor_pos: int) -> bool:
    """
    Check whether Enter at cursor_pos should drop the quote marker
    instead of carrying it to the new line.
    """
    _, quote_len = get_quote_string(line)
    if quote_len == 0:
        return False

    if cursor_pos >= len(line):
        return True

    if line[cursor_pos] == "\n":
        return True

    return cursor_pos < quote_len


def word_wrap_quote_aware(text: str, width: int, quote_margin: int) -> list[str]:
    """
    Word-wrap text, repeating each quoted line's marker on its continuations.

    Args:
        text: LF separated text
        width: Wrap column for plain lines
        quote_margin: Wrap column for quoted lines (marker included)

    Returns:
        List of wrapped lines
    """
    if not text:
        return [""]

    lines = []
    for line in text.split("\n"):
        if not line:
            lines.append("")
            continue

        marker, quote_len = get_quote_string(line)
        margin = quote_margin if quote_len > 0 else width

        if len(line) <= margin:
            lines.append(line)
            continue

        for piece in _wrap_words(line[quote_len:], margin - quote_len):
            lines.append(marker + piece)

    return lines


def _wrap_words(content: str, max_width: int) -> list[str]:
    """Greedy word wrap; words longer than max_width get their own line."""
    if not content:
        return [""]

    if len(content) <= max_width:
        return [content]

    result = []
    current = ""
    for word in content.split():
        if current and len(current) + 1 + len(word) > max_width:
            result.append(current)
            current = word
        elif current:
            current += " " + word
        else:
            current = word

    if current:
        result.append(current)

    return result


def can_reflow_quoted_lines(line1: str, line2: str) -> bool:
    """Adjacent quoted lines may be merged only if their markers match."""
    return get_quote_string(line1)[0] == get_quote_string(line2)[0]


def quote_text(body: str, initials: str, width: int = 79, quote_margin: int = 79) -> list[str]:
    """
    Build a reply citation from a message body.

    Plain lines get a " XX> " marker, already quoted lines get one more
    level, kludge lines are dropped and the result is rewrapped.

    Args:
        body: Message body, CR or LF separated
        initials: Author initials for the marker, e.g. "JD"
        width: Wrap column for plain lines
        quote_margin: Wrap column for quoted lines

    Returns:
        Quoted, wrapped lines
    """
    quoted = []
    for line in body.replace("\r", "\n").split("\n"):
        if line.startswith(CTRL_A):
            continue
        if not line.strip():
            quoted.append("")
            continue

        marker, quote_len = get_quote_string(line)
        if quote_len:
            # " JD> text" -> " JD>> text"
            gt = marker.rfind(">") + 1
            quoted.append(marker[:gt] + ">" + line[gt:])
        else:
            quoted.append(f" {initials}> {line}")

    return word_wrap_quote_aware("\n".join(quoted), width, quote_margin)


def author_initials(name: str) -> str:
    """Initials used in quote markers ("John Doe" -> "JD")."""
    return "".join(part[0] for part in name.split() if part[0].isalpha())[:3]
