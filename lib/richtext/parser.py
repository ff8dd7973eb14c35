"""
Main Markdown Parser for the ticketdoc rich-text engine

This module provides the MarkdownParser class that composes block
segmentation and inline tokenizing into an immutable Document tree.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .ast_nodes import (
    Block,
    Blockquote,
    BulletList,
    CodeBlock,
    Document,
    HardBreak,
    Heading,
    Inline,
    ListItem,
    OrderedList,
    Paragraph,
    Rule,
)
from .escaping import normalize_newlines, strip_control_chars
from .inline_parser import InlineParser
from .segmenter import DEFAULT_MAX_NESTING_DEPTH, BlockKind, BlockSegmenter, RawBlock

logger = logging.getLogger(__name__)


class MarkdownParser:
    """
    Markdown parser that coordinates all parsing stages.

    1. Block segmentation: normalize line endings, split input into raw block records
    2. Inline parsing: drop control characters, tokenize heading, paragraph and list item text
    3. Tree building: assemble the immutable Document

    Code block text skips inline parsing and is kept byte for byte.
    Parsing never fails for string input: anything that is not recognised
    ends up as paragraph text.

    Statistics are collected per call and published in ``parse_stats`` when
    the call returns, so a shared instance can parse from several threads.
    ``get_stats`` then reports whichever call finished last.
    """

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        """
        Initialize the Markdown parser.

        Args:
            options: Optional parser configuration
        """
        self.options = options or {}

        # Parser options
        self.max_nesting_depth = self.options.get("max_nesting_depth", DEFAULT_MAX_NESTING_DEPTH)

        # Initialize components
        self.segmenter = BlockSegmenter(max_nesting_depth=self.max_nesting_depth)
        self.inline_parser = InlineParser()

        # Statistics and debugging
        self.parse_stats: Dict[str, int] = self._new_stats()

    def parse(self, markdown_text: str) -> Document:
        """
        Parse Markdown text into a Document.

        Args:
            markdown_text: The Markdown text to parse

        Returns:
            Document representing the parsed text

        Raises:
            ValueError: If input is not a string
        """
        if not isinstance(markdown_text, str):
            raise ValueError("Input must be a string")

        stats = self._new_stats()

        text = normalize_newlines(markdown_text)
        stats["lines_processed"] = text.count("\n") + 1

        raw_blocks = self.segmenter.segment(text)
        document = Document(tuple(self._build_block(raw, stats) for raw in raw_blocks))

        # Replaced, never updated in place
        self.parse_stats = stats
        logger.debug(f"Parsed document: {stats}")
        return document

    def parse_to_adf(self, markdown_text: str) -> Dict[str, Any]:
        """
        Parse Markdown text and return the ADF payload.

        Args:
            markdown_text: The Markdown text to parse

        Returns:
            ADF document dictionary
        """
        return self.parse(markdown_text).to_dict()

    def parse_inline(self, text: str) -> List[Inline]:
        """
        Tokenize a multi-line inline text.

        Lines are cleaned of control characters, tokenized one by one and
        separated by hard breaks. Does not touch ``parse_stats``.
        """
        result: List[Inline] = []
        for index, line in enumerate(text.split("\n")):
            if index:
                result.append(HardBreak())
            result.extend(self.inline_parser.parse(strip_control_chars(line)))

        # A paragraph of empty lines has nothing but breaks
        if all(isinstance(node, HardBreak) for node in result):
            result = []

        return result

    def _build_inlines(self, text: str, stats: Dict[str, int]) -> Tuple[Inline, ...]:
        inlines = self.parse_inline(text)
        stats["inline_elements_parsed"] += len(inlines)
        return tuple(inlines)

    def _build_block(self, raw: RawBlock, stats: Dict[str, int]) -> Block:
        stats["blocks_parsed"] += 1

        if raw.kind == BlockKind.HEADING:
            return Heading(raw.level, self._build_inlines(raw.text, stats))
        if raw.kind == BlockKind.CODE:
            # Code text is never inline-parsed
            return CodeBlock(raw.text, raw.language)
        if raw.kind == BlockKind.BULLET_LIST:
            return BulletList(tuple(self._build_list_item(item, stats) for item in raw.items))
        if raw.kind == BlockKind.ORDERED_LIST:
            return OrderedList(tuple(self._build_list_item(item, stats) for item in raw.items))
        if raw.kind == BlockKind.BLOCKQUOTE:
            return Blockquote(tuple(self._build_block(child, stats) for child in raw.children))
        if raw.kind == BlockKind.RULE:
            return Rule()
        return Paragraph(self._build_inlines(raw.text, stats))

    def _build_list_item(self, text: str, stats: Dict[str, int]) -> ListItem:
        stats["blocks_parsed"] += 1
        return ListItem((Paragraph(self._build_inlines(text, stats)),))

    @staticmethod
    def _new_stats() -> Dict[str, int]:
        """Create an empty statistics record."""
        return {
            "lines_processed": 0,
            "blocks_parsed": 0,
            "inline_elements_parsed": 0,
        }

    def get_stats(self) -> Dict[str, int]:
        """
        Get parsing statistics from the last parse operation.

        Returns:
            Dictionary containing parsing statistics
        """
        return self.parse_stats.copy()

    def get_option(self, key: str, default: Any = None) -> Any:
        """
        Get a parser option.

        Args:
            key: Option name
            default: Default value if option not found

        Returns:
            Option value or default
        """
        return self.options.get(key, default)


# Convenience functions for quick parsing


def parse_markdown(text: str, **options) -> Document:
    """
    Parse Markdown text into a Document.

    Args:
        text: Markdown text to parse
        **options: Parser options

    Returns:
        Document representing the parsed text
    """
    parser = MarkdownParser(options)
    return parser.parse(text)


def markdown_to_adf(text: str, **options) -> Dict[str, Any]:
    """
    Convert Markdown text to an ADF document dictionary.

    Args:
        text: Markdown text to convert
        **options: Parser options

    Returns:
        ADF dictionary ready to be sent to a tracker
    """
    parser = MarkdownParser(options)
    return parser.parse_to_adf(text)
