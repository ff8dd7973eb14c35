"""
Markdown Emitter for the ticketdoc rich-text engine

``MarkdownBuilder`` is an append-only builder producing Markdown text that
the parser reads back. Block methods return the builder for chaining, inline
helpers return strings to be embedded in block text.
"""

import re
from typing import List, Optional, Sequence

from .escaping import escape_code_span

# Lines that would close a ``` fence early
_BACKTICK_FENCE_LINE_PATTERN = re.compile(r"^\s*(`{3,})\s*$", re.MULTILINE)


def bold(text: str) -> str:
    return f"**{text}**"


def italic(text: str) -> str:
    return f"*{text}*"


def code(text: str) -> str:
    """
    Inline code span. The only helper that escapes its input.

    Empty text gives an empty string: a span needs at least one character.
    """
    if not text:
        return ""
    return f"`{escape_code_span(text)}`"


def link(text: str, url: str, title: Optional[str] = None) -> str:
    if title:
        return f'[{text}]({url} "{title}")'
    return f"[{text}]({url})"


def strikethrough(text: str) -> str:
    return f"~~{text}~~"


def _code_fence(code_text: str) -> str:
    """Shortest backtick fence (at least 3) not closed by any line of the code."""
    longest = max((len(match.group(1)) for match in _BACKTICK_FENCE_LINE_PATTERN.finditer(code_text)), default=0)
    return "`" * max(3, longest + 1)


class MarkdownBuilder:
    """
    Builder class for constructing Markdown documents.

    Plain text passed to block methods is emitted as-is (no escaping).
    """

    def __init__(self):
        self.content: List[str] = []

    def heading(self, text: str, level: int = 1) -> "MarkdownBuilder":
        """Add a heading (H1-H6)."""
        if not 1 <= level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {level}")
        self.content.append(f"{'#' * level} {text}\n")
        return self

    def paragraph(self, text: str = "") -> "MarkdownBuilder":
        if text:
            self.content.append(f"{text}\n")
        else:
            self.content.append("\n")
        return self

    def code_block(self, code_text: str, language: str = "") -> "MarkdownBuilder":
        """Add a fenced code block with optional language."""
        fence = _code_fence(code_text)
        self.content.append(f"{fence}{language or ''}\n{code_text}\n{fence}\n")
        return self

    def blockquote(self, text: str) -> "MarkdownBuilder":
        quoted = "\n".join(f"> {line}" for line in text.split("\n"))
        self.content.append(f"{quoted}\n")
        return self

    def horizontal_rule(self) -> "MarkdownBuilder":
        self.content.append("---\n")
        return self

    def bullet_list(self, items: Sequence[str]) -> "MarkdownBuilder":
        for item in items:
            self.content.append(f"- {item}\n")
        self.content.append("\n")
        return self

    def ordered_list(self, items: Sequence[str]) -> "MarkdownBuilder":
        """Add an ordered list, always numbered from 1."""
        for index, item in enumerate(items, start=1):
            self.content.append(f"{index}. {item}\n")
        self.content.append("\n")
        return self

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> "MarkdownBuilder":
        """
        Add a table.

        Args:
            headers: Header cells
            rows: Data rows, each a sequence of cells

        Returns:
            The builder
        """
        self.content.append(f"| {' | '.join(headers)} |\n")
        self.content.append(f"| {' | '.join('---' for _ in headers)} |\n")
        for row in rows:
            self.content.append(f"| {' | '.join(row)} |\n")
        self.content.append("\n")
        return self

    def task_list_item(self, text: str, checked: bool = False) -> "MarkdownBuilder":
        checkbox = "[x]" if checked else "[ ]"
        self.content.append(f"- {checkbox} {text}\n")
        return self

    def raw(self, text: str) -> "MarkdownBuilder":
        """Add raw text (use sparingly - for complex formatting)."""
        self.content.append(text)
        return self

    def line_break(self) -> "MarkdownBuilder":
        """Add a line break (double space + newline)."""
        self.content.append("  \n")
        return self

    def build(self) -> str:
        return "".join(self.content)

    def clear(self) -> "MarkdownBuilder":
        self.content = []
        return self

    # Inline helpers, also available as module functions

    bold = staticmethod(bold)
    italic = staticmethod(italic)
    code = staticmethod(code)
    link = staticmethod(link)
    strikethrough = staticmethod(strikethrough)
