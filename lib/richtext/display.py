"""
Display Projector for the ticketdoc rich-text engine

Maps Markdown text or a Document to a presentation tree (``DisplayNode``)
that host UIs render directly. Code blocks get syntax highlight tokens when
the grammar is known; highlighting never makes projection fail.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .ast_nodes import (
    Blockquote,
    BulletList,
    CodeBlock,
    Document,
    HardBreak,
    Heading,
    ListItem,
    MarkType,
    Node,
    OrderedList,
    Panel,
    Paragraph,
    Rule,
    Text,
)
from .highlight import GrammarRegistry, HighlightError, HighlightToken
from .languages import PLAIN_TEXT, normalize_language
from .parser import MarkdownParser

logger = logging.getLogger(__name__)


class DisplayKind(Enum):
    """Presentation node kinds, one per document node type."""
    DOCUMENT = "document"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE_BLOCK = "code_block"
    BULLET_LIST = "bullet_list"
    ORDERED_LIST = "ordered_list"
    LIST_ITEM = "list_item"
    BLOCKQUOTE = "blockquote"
    RULE = "rule"
    PANEL = "panel"
    TEXT = "text"
    HARD_BREAK = "hard_break"


@dataclass(frozen=True)
class DisplayNode:
    """
    A node of the presentation tree.

    ``text`` is set on text and code block nodes, ``styles`` holds mark names
    of text nodes, ``attrs`` carries kind-specific attributes (heading level,
    link href, panel type...). ``tokens`` is None for code blocks rendered
    without highlighting.
    """

    kind: DisplayKind
    children: Tuple["DisplayNode", ...] = ()
    text: Optional[str] = None
    styles: Tuple[str, ...] = ()
    attrs: Mapping[str, Any] = field(default_factory=dict)
    language: Optional[str] = None
    tokens: Optional[Tuple[HighlightToken, ...]] = None

    def __post_init__(self):
        # Read-only copy of the caller's mapping
        object.__setattr__(self, "attrs", MappingProxyType(dict(self.attrs)))

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to a JSON-serializable dictionary."""
        result: Dict[str, Any] = {"kind": self.kind.value}
        if self.text is not None:
            result["text"] = self.text
        if self.styles:
            result["styles"] = list(self.styles)
        if self.attrs:
            result["attrs"] = dict(self.attrs)
        if self.kind == DisplayKind.CODE_BLOCK:
            result["language"] = self.language
            result["tokens"] = [token.to_dict() for token in self.tokens] if self.tokens is not None else None
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


class DisplayProjector:
    """
    Projects Markdown strings or Documents to display trees.

    Args:
        registry: Grammar registry used for highlighting, defaults to
            ``GrammarRegistry.default()``
        highlight: Whether code blocks are highlighted at all
        parser: Parser used for Markdown input, a fresh ``MarkdownParser``
            per call when omitted
        aliases: Extra language aliases checked before the built-in table
    """

    def __init__(
        self,
        registry: Optional[GrammarRegistry] = None,
        highlight: bool = True,
        parser: Optional[MarkdownParser] = None,
        aliases: Optional[Mapping[str, str]] = None,
    ):
        self.registry = registry if registry is not None else GrammarRegistry.default()
        self.highlight = highlight
        self.parser = parser
        self.aliases = dict(aliases or {})

    def project(self, source: Union[str, Document]) -> DisplayNode:
        """
        Build the display tree.

        Args:
            source: Markdown text or an already parsed Document

        Returns:
            DisplayNode of kind DOCUMENT
        """
        if isinstance(source, Document):
            document = source
        else:
            parser = self.parser if self.parser is not None else MarkdownParser()
            document = parser.parse(source)
        return self._project_node(document)

    def _project_children(self, nodes) -> Tuple[DisplayNode, ...]:
        return tuple(self._project_node(node) for node in nodes)

    def _project_node(self, node: Node) -> DisplayNode:
        if isinstance(node, Document):
            return DisplayNode(DisplayKind.DOCUMENT, self._project_children(node.content))
        elif isinstance(node, Heading):
            return DisplayNode(DisplayKind.HEADING, self._project_children(node.content), attrs={"level": node.level})
        elif isinstance(node, Paragraph):
            return DisplayNode(DisplayKind.PARAGRAPH, self._project_children(node.content))
        elif isinstance(node, CodeBlock):
            return self._project_code_block(node)
        elif isinstance(node, BulletList):
            return DisplayNode(DisplayKind.BULLET_LIST, self._project_children(node.items))
        elif isinstance(node, OrderedList):
            return DisplayNode(DisplayKind.ORDERED_LIST, self._project_children(node.items))
        elif isinstance(node, ListItem):
            return DisplayNode(DisplayKind.LIST_ITEM, self._project_children(node.content))
        elif isinstance(node, Blockquote):
            return DisplayNode(DisplayKind.BLOCKQUOTE, self._project_children(node.content))
        elif isinstance(node, Rule):
            return DisplayNode(DisplayKind.RULE)
        elif isinstance(node, Panel):
            return DisplayNode(
                DisplayKind.PANEL, self._project_children(node.content), attrs={"panel_type": node.panel_type.value}
            )
        elif isinstance(node, Text):
            return self._project_text(node)
        elif isinstance(node, HardBreak):
            return DisplayNode(DisplayKind.HARD_BREAK)
        else:
            raise ValueError(f"Unsupported node type: {type(node).__name__}")

    def _project_text(self, node: Text) -> DisplayNode:
        attrs: Dict[str, Any] = {}
        link = node.get_mark(MarkType.LINK)
        if link is not None:
            attrs["href"] = link.href
            if link.title:
                attrs["title"] = link.title
        color = node.get_mark(MarkType.TEXT_COLOR)
        if color is not None:
            attrs["color"] = color.color

        styles = tuple(mark.mark_type.value for mark in node.marks)
        return DisplayNode(DisplayKind.TEXT, text=node.text, styles=styles, attrs=attrs)

    def _project_code_block(self, node: CodeBlock) -> DisplayNode:
        language = normalize_language(node.language, self.aliases)
        tokens = self._highlight(language, node.text)
        return DisplayNode(DisplayKind.CODE_BLOCK, text=node.text, language=language, tokens=tokens)

    def _highlight(self, language: str, code: str) -> Optional[Tuple[HighlightToken, ...]]:
        """Highlight tokens, or None when the code is shown plain."""
        if not self.highlight or language == PLAIN_TEXT or not self.registry.is_registered(language):
            return None

        try:
            tokens: List[HighlightToken] = self.registry.highlight(language, code)
        except HighlightError as e:
            logger.warning(f"Highlighting failed, falling back to plain code: {e}")
            return None
        return tuple(tokens)
