"""
Escaping and sanitizing helpers shared by the emitter and the inline parser.

Only backslash and backtick are escaped, and only inside code spans:
``escape_code_span`` and ``unescape_code_span`` are exact inverses.
"""

import re

# Characters that must be escaped inside a code span
ESCAPE_CHARS_CODE_SPAN = "\\`"

# C0 control characters except tab and newline
_CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_CODE_SPAN_ESCAPE_PATTERN = re.compile(r"\\([\\`])")


def escape_code_span(text: str) -> str:
    """
    Escape text for use inside an inline code span.

    Args:
        text: Raw code text

    Returns:
        Text with backslashes and backticks prefixed by a backslash
    """
    # Backslashes first to avoid double-escaping
    text = text.replace("\\", "\\\\")
    return text.replace("`", "\\`")


def unescape_code_span(text: str) -> str:
    """Reverse ``escape_code_span``. Other backslash sequences are left as-is."""
    return _CODE_SPAN_ESCAPE_PATTERN.sub(r"\1", text)


def normalize_newlines(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def strip_control_chars(text: str) -> str:
    """
    Drop control characters that have no meaning in inline text.

    Tabs and newlines are kept. Code block text never goes through this.
    """
    return _CONTROL_CHARS_PATTERN.sub("", text)


def escape_wiki(text: str) -> str:
    """Escape the characters Jira wiki markup treats as macro or link delimiters."""
    return re.sub(r"([{}\[\]|])", r"\\\1", text)
