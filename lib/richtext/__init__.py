"""
ticketdoc rich-text engine

Converts ticket descriptions between Markdown, the structured document
model (serialized as Atlassian Document Format) and a display tree with
syntax-highlighted code blocks.

This module provides:
- Block segmentation and inline tokenizing of Markdown
- Immutable Document tree with ADF serialization
- ADF input and a fluent document builder
- Markdown emitting (MarkdownBuilder) and rendering (Markdown, Jira wiki, HTML)
- Display projection with Pygments highlighting

Usage:
    from lib.richtext import MarkdownParser, markdown_to_adf, adf_to_markdown

    document = MarkdownParser().parse("# Bug\n\nSteps:\n\n1. Open **settings**")
    payload = document.to_dict()

    # Convenience functions
    payload = markdown_to_adf("**Bold** and *italic* text")
    markdown = adf_to_markdown(payload)
"""

from .adf import AdfBuilder, AdfError, adf_to_markdown, document_from_adf, is_adf_document
from .ast_nodes import (
    ADF_VERSION,
    CODE,
    EMPHASIS,
    STRIKE,
    STRONG,
    UNDERLINE,
    Blockquote,
    BulletList,
    CodeBlock,
    Document,
    HardBreak,
    Heading,
    ListItem,
    Mark,
    MarkType,
    NodeType,
    OrderedList,
    Panel,
    PanelType,
    Paragraph,
    Rule,
    Text,
)
from .display import DisplayKind, DisplayNode, DisplayProjector
from .emitter import MarkdownBuilder
from .highlight import GrammarRegistry, HighlightError, HighlightToken
from .inline_parser import InlineParser
from .languages import LANGUAGE_ALIASES, language_from_extension, normalize_language
from .parser import MarkdownParser, markdown_to_adf, parse_markdown
from .renderer import (
    HTMLRenderer,
    MarkdownRenderer,
    WikiRenderer,
    document_to_markdown,
    markdown_to_display,
    markdown_to_html,
    markdown_to_wiki,
    normalize_markdown,
)
from .segmenter import BlockSegmenter

__version__ = "1.0.0"
__all__ = [
    "MarkdownParser",
    "parse_markdown",
    "markdown_to_adf",
    "markdown_to_html",
    "markdown_to_wiki",
    "markdown_to_display",
    "normalize_markdown",
    "document_to_markdown",
    "adf_to_markdown",
    "document_from_adf",
    "is_adf_document",
    "AdfBuilder",
    "AdfError",
    "BlockSegmenter",
    "InlineParser",
    "MarkdownBuilder",
    "MarkdownRenderer",
    "WikiRenderer",
    "HTMLRenderer",
    "DisplayProjector",
    "DisplayNode",
    "DisplayKind",
    "GrammarRegistry",
    "HighlightError",
    "HighlightToken",
    "LANGUAGE_ALIASES",
    "normalize_language",
    "language_from_extension",
    # Document nodes
    "ADF_VERSION",
    "Document",
    "Paragraph",
    "Heading",
    "CodeBlock",
    "BulletList",
    "OrderedList",
    "ListItem",
    "Blockquote",
    "Rule",
    "Panel",
    "PanelType",
    "Text",
    "HardBreak",
    "Mark",
    "MarkType",
    "NodeType",
    "STRONG",
    "EMPHASIS",
    "CODE",
    "STRIKE",
    "UNDERLINE",
]
