"""
Block Segmenter for the ticketdoc rich-text engine

This module splits whole-document text into block-level records (headings,
fenced code, lists, block quotes, rules and paragraphs). It never rejects
input: anything it cannot classify becomes paragraph text.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from .escaping import normalize_newlines

logger = logging.getLogger(__name__)

DEFAULT_MAX_NESTING_DEPTH = 100


class BlockKind(Enum):
    """Kinds of raw block records."""
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE = "code"
    BULLET_LIST = "bullet_list"
    ORDERED_LIST = "ordered_list"
    BLOCKQUOTE = "blockquote"
    RULE = "rule"


class LineType(Enum):
    """Per-line classification driving the state machine."""
    BLANK = "blank"
    HEADING = "heading"
    RULE = "rule"
    FENCE = "fence"
    BULLET_ITEM = "bullet_item"
    ORDERED_ITEM = "ordered_item"
    QUOTE = "quote"
    TEXT = "text"


class SegmenterState(Enum):
    """States of the block-level state machine."""
    DEFAULT = "default"
    IN_CODE_FENCE = "in_code_fence"
    IN_BULLET_LIST = "in_bullet_list"
    IN_ORDERED_LIST = "in_ordered_list"
    IN_BLOCKQUOTE = "in_blockquote"


class ClassifiedLine(NamedTuple):
    """A source line with its classification."""
    line_type: LineType
    content: str = ""
    level: int = 0
    fence: str = ""
    language: Optional[str] = None


@dataclass(frozen=True)
class RawBlock:
    """
    A block-level region of the source text before inline parsing.

    ``text`` holds heading/paragraph/code text, ``items`` the list item
    texts and ``children`` the re-segmented content of a block quote.
    """

    kind: BlockKind
    text: str = ""
    level: int = 0
    language: Optional[str] = None
    items: Tuple[str, ...] = ()
    children: Tuple["RawBlock", ...] = ()


# Maps the line type that opens a run to the state that continues it
_RUN_STATES = {
    LineType.BULLET_ITEM: SegmenterState.IN_BULLET_LIST,
    LineType.ORDERED_ITEM: SegmenterState.IN_ORDERED_LIST,
    LineType.QUOTE: SegmenterState.IN_BLOCKQUOTE,
}


class BlockSegmenter:
    """
    Segmenter that turns text into an ordered list of ``RawBlock`` records.

    Lines are classified one at a time; multi-line constructs (code fences,
    lists, block quotes, paragraphs) are tracked as local state of a single
    ``segment`` call, so one instance can be reused freely.
    """

    def __init__(self, max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH):
        self.max_nesting_depth = max_nesting_depth

        # Compile regex patterns for efficiency
        self._compile_patterns()

    def _compile_patterns(self) -> None:
        """Compile regex patterns used for line classification."""
        # 1-6 '#', whitespace, then text; seven or more never match
        self.heading_pattern = re.compile(r"^(#{1,6})[ \t]+(.+)$")

        # Opening fence with optional info string, closing fence without one
        self.fence_pattern = re.compile(r"^(`{3,}|~{3,})(.*)$")
        self.closing_fence_pattern = re.compile(r"^(`{3,}|~{3,})[ \t]*$")

        self.bullet_pattern = re.compile(r"^[-*+][ \t]+(.*)$")
        self.ordered_pattern = re.compile(r"^\d+\.[ \t]+(.*)$")

        # One whitespace character after '>' is part of the marker; a bare '>' is an empty quote line
        self.quote_pattern = re.compile(r"^>(?:[ \t](.*))?$")

        self.rule_markers = {"---", "***", "___"}

    def classify(self, line: str) -> ClassifiedLine:
        """
        Classify a single source line.

        Args:
            line: One line of input without its newline

        Returns:
            ClassifiedLine describing the line
        """
        stripped = line.strip()
        if not stripped:
            return ClassifiedLine(LineType.BLANK)

        match = self.fence_pattern.match(stripped)
        if match:
            fence = match.group(1)
            info = match.group(2).strip()
            # Backtick fences cannot carry backticks in their info string
            if not (fence[0] == "`" and "`" in info):
                language = info.split()[0] if info else None
                return ClassifiedLine(LineType.FENCE, fence=fence, language=language)

        match = self.heading_pattern.match(stripped)
        if match:
            return ClassifiedLine(LineType.HEADING, match.group(2).strip(), level=len(match.group(1)))

        if stripped in self.rule_markers:
            return ClassifiedLine(LineType.RULE)

        unindented = line.lstrip()

        match = self.bullet_pattern.match(unindented)
        if match:
            return ClassifiedLine(LineType.BULLET_ITEM, match.group(1).strip())

        match = self.ordered_pattern.match(unindented)
        if match:
            return ClassifiedLine(LineType.ORDERED_ITEM, match.group(1).strip())

        match = self.quote_pattern.match(unindented.rstrip())
        if match:
            return ClassifiedLine(LineType.QUOTE, match.group(1) or "")

        return ClassifiedLine(LineType.TEXT, stripped)

    def is_closing_fence(self, line: str, opening_fence: str) -> bool:
        """Check whether a line closes a fence opened with ``opening_fence``."""
        match = self.closing_fence_pattern.match(line.strip())
        if not match:
            return False
        fence = match.group(1)
        return fence[0] == opening_fence[0] and len(fence) >= len(opening_fence)

    def segment(self, text: str) -> List[RawBlock]:
        """
        Segment text into raw blocks.

        Args:
            text: Full document text

        Returns:
            Non-empty list of RawBlock records. Input without any block
            yields a single empty paragraph.
        """
        return self._segment(text, depth=0)

    def _segment(self, text: str, depth: int) -> List[RawBlock]:
        segmentation = _SegmentationPass(self, depth)
        for line in normalize_newlines(text).split("\n"):
            segmentation.feed(line)
        blocks = segmentation.finish()

        if not blocks:
            blocks = [RawBlock(BlockKind.PARAGRAPH)]
        return blocks

    def _segment_quote(self, text: str, depth: int) -> Tuple[RawBlock, ...]:
        """Re-segment block quote content, unless nesting is already too deep."""
        if depth >= self.max_nesting_depth:
            logger.debug(f"Block quote nesting depth {depth} reached, keeping content as text")
            return (RawBlock(BlockKind.PARAGRAPH, text=text),)
        return tuple(self._segment(text, depth + 1))


class _SegmentationPass:
    """Mutable state of one segmentation run."""

    def __init__(self, segmenter: BlockSegmenter, depth: int):
        self.segmenter = segmenter
        self.depth = depth
        self.state = SegmenterState.DEFAULT
        self.blocks: List[RawBlock] = []

        # Open paragraph lines (only in DEFAULT state)
        self.paragraph_lines: List[str] = []
        # List item texts or quote lines of the open run
        self.run_lines: List[str] = []
        # Open code fence
        self.fence = ""
        self.language: Optional[str] = None
        self.code_lines: List[str] = []

    def feed(self, line: str) -> None:
        """Process one source line."""
        if self.state == SegmenterState.IN_CODE_FENCE:
            if self.segmenter.is_closing_fence(line, self.fence):
                self._flush_code()
            else:
                self.code_lines.append(line)
            return

        classified = self.segmenter.classify(line)

        # Continue the open run
        if self.state != SegmenterState.DEFAULT and _RUN_STATES.get(classified.line_type) == self.state:
            self.run_lines.append(classified.content)
            return

        if self.state == SegmenterState.DEFAULT and classified.line_type == LineType.TEXT:
            self.paragraph_lines.append(classified.content)
            return

        # Anything else closes whatever is open
        self._flush_run()
        self._flush_paragraph()

        if classified.line_type == LineType.HEADING:
            self.blocks.append(RawBlock(BlockKind.HEADING, text=classified.content, level=classified.level))
        elif classified.line_type == LineType.RULE:
            self.blocks.append(RawBlock(BlockKind.RULE))
        elif classified.line_type == LineType.FENCE:
            self.state = SegmenterState.IN_CODE_FENCE
            self.fence = classified.fence
            self.language = classified.language
            self.code_lines = []
        elif classified.line_type in _RUN_STATES:
            self.state = _RUN_STATES[classified.line_type]
            self.run_lines = [classified.content]
        elif classified.line_type == LineType.TEXT:
            self.paragraph_lines.append(classified.content)
        # BLANK: nothing to open

    def finish(self) -> List[RawBlock]:
        """Flush any open construct at end of input."""
        if self.state == SegmenterState.IN_CODE_FENCE:
            # Unterminated fence closes implicitly
            self._flush_code()
        self._flush_run()
        self._flush_paragraph()
        return self.blocks

    def _flush_code(self) -> None:
        self.blocks.append(RawBlock(BlockKind.CODE, text="\n".join(self.code_lines), language=self.language))
        self.code_lines = []
        self.fence = ""
        self.language = None
        self.state = SegmenterState.DEFAULT

    def _flush_run(self) -> None:
        if self.state == SegmenterState.IN_BULLET_LIST:
            self.blocks.append(RawBlock(BlockKind.BULLET_LIST, items=tuple(self.run_lines)))
        elif self.state == SegmenterState.IN_ORDERED_LIST:
            self.blocks.append(RawBlock(BlockKind.ORDERED_LIST, items=tuple(self.run_lines)))
        elif self.state == SegmenterState.IN_BLOCKQUOTE:
            children = self.segmenter._segment_quote("\n".join(self.run_lines), self.depth)
            self.blocks.append(RawBlock(BlockKind.BLOCKQUOTE, children=children))
        else:
            return
        self.run_lines = []
        self.state = SegmenterState.DEFAULT

    def _flush_paragraph(self) -> None:
        if self.paragraph_lines:
            self.blocks.append(RawBlock(BlockKind.PARAGRAPH, text="\n".join(self.paragraph_lines)))
            self.paragraph_lines = []
