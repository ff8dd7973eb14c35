"""
Inline Parser for the ticketdoc rich-text engine

This module turns a single line of text into marked text runs: code spans,
bold, italic, strikethrough and links. Nested spans are handled with an
explicit work-stack, so arbitrarily deep nesting never recurses.
"""

import re
from typing import List, Tuple

from .ast_nodes import CODE, EMPHASIS, STRIKE, STRONG, Mark, Text, merge_marks
from .escaping import unescape_code_span

# Work-stack entry: text, active marks, whether the text still has to be tokenized
_WorkItem = Tuple[str, Tuple[Mark, ...], bool]


class InlineParser:
    """
    Parser for inline Markdown elements.

    A single combined pattern is scanned left to right; at any position the
    first alternative that matches wins (code, bold, italic, strikethrough,
    link). Matched bold/italic/strikethrough/link text is tokenized again with
    the corresponding mark added, code text is taken verbatim.
    """

    def __init__(self):
        # Compile regex patterns for efficiency
        self._compile_patterns()

    def _compile_patterns(self) -> None:
        """Compile the combined inline pattern."""
        # Order of alternatives is the priority order
        self.inline_pattern = re.compile(
            r"`(?P<code>(?:\\.|[^`\\]|\\)+)`"
            r"|\*\*(?P<bold>.+?)\*\*(?!\*)"
            r"|__(?P<bold_u>.+?)__(?!_)"
            r"|\*(?P<italic>[^*]+)\*"
            r"|(?<!\w)_(?P<italic_u>[^_]+)_(?!\w)"
            r"|~~(?P<strike>.+?)~~"
            r'|\[(?P<link_text>[^\]]+)\]\((?P<link_href>[^)\s]+)(?:\s+"(?P<link_title>[^"]*)")?\)'
        )

    def parse(self, text: str, marks: Tuple[Mark, ...] = ()) -> List[Text]:
        """
        Tokenize text into marked runs.

        Args:
            text: Inline text (no block markup)
            marks: Marks already active for the whole text

        Returns:
            List of Text runs in source order; adjacent runs with equal marks
            are merged and empty runs are dropped
        """
        runs: List[Text] = []
        stack: List[_WorkItem] = [(text, tuple(marks), True)]

        while stack:
            chunk, active, pending = stack.pop()
            if not pending:
                runs.append(Text(chunk, active))
                continue

            pieces = self._split(chunk, active)
            # Reversed so the leftmost piece is popped first
            stack.extend(reversed(pieces))

        return self._merge_runs(runs)

    def _split(self, text: str, marks: Tuple[Mark, ...]) -> List[_WorkItem]:
        """Split text at top-level inline matches."""
        pieces: List[_WorkItem] = []
        pos = 0

        for match in self.inline_pattern.finditer(text):
            if match.start() > pos:
                pieces.append((text[pos : match.start()], marks, False))
            pieces.append(self._handle_match(match, marks))
            pos = match.end()

        if pos < len(text):
            pieces.append((text[pos:], marks, False))
        return pieces

    def _handle_match(self, match: "re.Match[str]", marks: Tuple[Mark, ...]) -> _WorkItem:
        groups = match.groupdict()

        if groups["code"] is not None:
            return (unescape_code_span(groups["code"]), merge_marks(marks, CODE), False)

        if groups["bold"] is not None or groups["bold_u"] is not None:
            content = groups["bold"] if groups["bold"] is not None else groups["bold_u"]
            return (content, merge_marks(marks, STRONG), True)

        if groups["italic"] is not None or groups["italic_u"] is not None:
            content = groups["italic"] if groups["italic"] is not None else groups["italic_u"]
            return (content, merge_marks(marks, EMPHASIS), True)

        if groups["strike"] is not None:
            return (groups["strike"], merge_marks(marks, STRIKE), True)

        link = Mark.link(groups["link_href"], groups["link_title"])
        return (groups["link_text"], merge_marks(marks, link), True)

    def _merge_runs(self, runs: List[Text]) -> List[Text]:
        """Merge adjacent runs with equal marks and drop empty runs."""
        merged: List[Text] = []
        for run in runs:
            if not run.text:
                continue
            if merged and merged[-1].marks == run.marks:
                merged[-1] = Text(merged[-1].text + run.text, run.marks)
            else:
                merged.append(run)
        return merged
