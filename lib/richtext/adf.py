"""
Structured document (ADF) input and building.

Reads Atlassian Document Format payloads back into the Document model and
provides ``AdfBuilder``, a fluent API for assembling documents in code.
Serialization to ADF is ``Document.to_dict()``.
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .ast_nodes import (
    CODE,
    EMPHASIS,
    STRIKE,
    STRONG,
    UNDERLINE,
    Block,
    Blockquote,
    BulletList,
    CodeBlock,
    Document,
    HardBreak,
    Heading,
    Inline,
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
    merge_marks,
)
from .renderer import MarkdownRenderer

logger = logging.getLogger(__name__)

AdfInput = Union[str, Dict[str, Any]]

_SIMPLE_MARKS = {
    MarkType.STRONG.value: STRONG,
    MarkType.EMPHASIS.value: EMPHASIS,
    MarkType.CODE.value: CODE,
    MarkType.STRIKE.value: STRIKE,
    MarkType.UNDERLINE.value: UNDERLINE,
}

_INLINE_TYPES = {NodeType.TEXT.value, NodeType.HARD_BREAK.value, "mention", "emoji", "inlineCard", "date", "status"}


class AdfError(Exception):
    """Raised for structurally invalid ADF documents."""


def _load(data: AdfInput) -> Dict[str, Any]:
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise AdfError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict) or data.get("type") != NodeType.DOCUMENT.value:
        raise AdfError("Root node must be a doc")
    if not isinstance(data.get("content", []), list):
        raise AdfError("Document content must be a list")
    return data


def document_from_adf(data: AdfInput) -> Document:
    """
    Convert an ADF payload to a Document.

    Args:
        data: ADF dictionary or its JSON text

    Returns:
        Document with the supported nodes. Unknown block nodes are replaced
        by their children, unknown inline nodes and marks are dropped.

    Raises:
        AdfError: If the payload is not JSON or has no doc root
    """
    root = _load(data)
    return Document(tuple(_blocks_from_adf(root.get("content", []))))


def _content(node: Dict[str, Any]) -> List[Dict[str, Any]]:
    content = node.get("content") or []
    if not isinstance(content, list):
        raise AdfError(f"Content of {node.get('type')} must be a list")
    return [child for child in content if isinstance(child, dict)]


def _attrs(node: Dict[str, Any]) -> Dict[str, Any]:
    attrs = node.get("attrs")
    return attrs if isinstance(attrs, dict) else {}


def _blocks_from_adf(nodes: Iterable[Dict[str, Any]]) -> List[Block]:
    blocks: List[Block] = []
    # Stray inline nodes at block level are collected into a paragraph
    pending_inline: List[Dict[str, Any]] = []

    def flush_inline():
        if pending_inline:
            blocks.append(Paragraph(tuple(_inlines_from_adf(pending_inline))))
            pending_inline.clear()

    for node in nodes:
        if node.get("type") in _INLINE_TYPES:
            pending_inline.append(node)
            continue
        flush_inline()
        blocks.extend(_block_from_adf(node))
    flush_inline()
    return blocks


def _block_from_adf(node: Dict[str, Any]) -> List[Block]:
    node_type = node.get("type")
    attrs = _attrs(node)

    if node_type == NodeType.PARAGRAPH.value:
        return [Paragraph(tuple(_inlines_from_adf(_content(node))))]

    if node_type == NodeType.HEADING.value:
        level = attrs.get("level", 1)
        if not isinstance(level, int) or not 1 <= level <= 6:
            raise AdfError(f"Invalid heading level: {level!r}")
        return [Heading(level, tuple(_inlines_from_adf(_content(node))))]

    if node_type == NodeType.CODE_BLOCK.value:
        text = "".join(str(child.get("text", "")) for child in _content(node))
        return [CodeBlock(text, attrs.get("language") or None)]

    if node_type in (NodeType.BULLET_LIST.value, NodeType.ORDERED_LIST.value):
        items = tuple(_list_item_from_adf(child) for child in _content(node))
        if node_type == NodeType.BULLET_LIST.value:
            return [BulletList(items)]
        return [OrderedList(items)]

    if node_type == NodeType.BLOCKQUOTE.value:
        return [Blockquote(tuple(_blocks_from_adf(_content(node))))]

    if node_type == NodeType.RULE.value:
        return [Rule()]

    if node_type == NodeType.PANEL.value:
        try:
            panel_type = PanelType(attrs.get("panelType", PanelType.INFO.value))
        except ValueError:
            logger.debug(f"Unknown panel type {attrs.get('panelType')!r}, using info")
            panel_type = PanelType.INFO
        return [Panel(panel_type, tuple(_blocks_from_adf(_content(node))))]

    # Unknown (or misplaced) node: keep what it contains
    logger.debug(f"Flattening unsupported ADF node {node_type!r}")
    return _blocks_from_adf(_content(node))


def _list_item_from_adf(node: Dict[str, Any]) -> ListItem:
    if node.get("type") == NodeType.LIST_ITEM.value:
        return ListItem(tuple(_blocks_from_adf(_content(node))))
    return ListItem(tuple(_blocks_from_adf([node])))


def _marks_from_adf(raw_marks: Any) -> tuple:
    marks: List[Mark] = []
    if not isinstance(raw_marks, list):
        return ()
    for raw in raw_marks:
        if not isinstance(raw, dict):
            continue
        mark_type = raw.get("type")
        attrs = _attrs(raw)
        if mark_type in _SIMPLE_MARKS:
            marks.append(_SIMPLE_MARKS[mark_type])
        elif mark_type == MarkType.LINK.value:
            marks.append(Mark.link(str(attrs.get("href", "")), attrs.get("title") or None))
        elif mark_type == MarkType.TEXT_COLOR.value:
            marks.append(Mark.text_color(str(attrs.get("color", ""))))
    return merge_marks(marks)


def _inlines_from_adf(nodes: Iterable[Dict[str, Any]]) -> List[Inline]:
    result: List[Inline] = []
    for node in nodes:
        node_type = node.get("type")
        if node_type == NodeType.TEXT.value:
            text = node.get("text") or ""
            if text:
                result.append(Text(str(text), _marks_from_adf(node.get("marks"))))
        elif node_type == NodeType.HARD_BREAK.value:
            result.append(HardBreak())
        else:
            logger.debug(f"Dropping unsupported inline ADF node {node_type!r}")
    return result


def adf_to_markdown(data: AdfInput, **options) -> str:
    """
    Convert an ADF payload to Markdown.

    Invalid payloads are not an error here: the input is returned as text,
    so callers can show whatever the tracker sent.

    Args:
        data: ADF dictionary or its JSON text
        **options: MarkdownRenderer options

    Returns:
        Markdown string
    """
    try:
        document = document_from_adf(data)
    except AdfError as e:
        logger.warning(f"Failed to convert ADF to Markdown, returning input as-is: {e}")
        return data if isinstance(data, str) else json.dumps(data, ensure_ascii=False, default=str)
    return MarkdownRenderer(options).render(document)


def is_adf_document(value: Any) -> bool:
    """Check whether a string is ADF JSON (a doc root with a content list)."""
    if not isinstance(value, str):
        return False
    try:
        parsed = json.loads(value)
    except ValueError:
        return False
    return isinstance(parsed, dict) and parsed.get("type") == "doc" and isinstance(parsed.get("content"), list)


# Inline factories


def text(value: str, marks: Sequence[Mark] = ()) -> Text:
    return Text(value, merge_marks(marks))


def strong(value: str) -> Text:
    return Text(value, (STRONG,))


def em(value: str) -> Text:
    return Text(value, (EMPHASIS,))


def code(value: str) -> Text:
    return Text(value, (CODE,))


def link(value: str, href: str, title: Optional[str] = None) -> Text:
    return Text(value, (Mark.link(href, title),))


def hard_break() -> HardBreak:
    return HardBreak()


class AdfBuilder:
    """
    Builder for creating documents.

    Every method but ``build`` returns the builder, so calls chain:
    ``AdfBuilder().heading("Summary", 2).paragraph("Done").build()``.
    """

    def __init__(self):
        self.content: List[Block] = []

    def paragraph(self, text: Optional[str] = None, marks: Sequence[Mark] = ()) -> "AdfBuilder":
        """Add a paragraph with optional text content."""
        if text:
            self.content.append(Paragraph((Text(text, merge_marks(marks)),)))
        else:
            self.content.append(Paragraph())
        return self

    def rich_paragraph(self, content: Sequence[Inline]) -> "AdfBuilder":
        """Add a paragraph with rich inline content."""
        self.content.append(Paragraph(tuple(content)))
        return self

    def code_block(self, code: str, language: Optional[str] = None) -> "AdfBuilder":
        self.content.append(CodeBlock(code, language))
        return self

    def heading(self, text: str, level: int) -> "AdfBuilder":
        # Heading validates the level
        self.content.append(Heading(level, (Text(text),) if text else ()))
        return self

    def bullet_list(self, items: Sequence[str]) -> "AdfBuilder":
        self.content.append(BulletList(tuple(self._list_item(item) for item in items)))
        return self

    def ordered_list(self, items: Sequence[str]) -> "AdfBuilder":
        self.content.append(OrderedList(tuple(self._list_item(item) for item in items)))
        return self

    def panel(self, panel_type: Union[str, PanelType], content: Sequence[Block]) -> "AdfBuilder":
        """
        Add a panel (colored box for info/warning/error).

        Raises:
            ValueError: If panel_type is not a known panel type
        """
        self.content.append(Panel(PanelType(panel_type), tuple(content)))
        return self

    def rule(self) -> "AdfBuilder":
        self.content.append(Rule())
        return self

    def build(self) -> Document:
        return Document(tuple(self.content))

    @staticmethod
    def _list_item(item: str) -> ListItem:
        return ListItem((Paragraph((Text(item),) if item else ()),))
