"""
AST Node Classes for the ticketdoc rich-text engine

This module defines the immutable tree that represents a parsed document.
Node type names follow the Atlassian Document Format (ADF), so that
``Document.to_dict()`` is directly the payload a document-oriented
tracker expects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

ADF_VERSION = 1


class NodeType(Enum):
    """Enumeration of all node types (values are ADF discriminators)."""
    DOCUMENT = "doc"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    CODE_BLOCK = "codeBlock"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    BLOCKQUOTE = "blockquote"
    RULE = "rule"
    PANEL = "panel"
    TEXT = "text"
    HARD_BREAK = "hardBreak"


class MarkType(Enum):
    """Formatting attributes a text run may carry."""
    STRONG = "strong"
    EMPHASIS = "em"
    CODE = "code"
    STRIKE = "strike"
    UNDERLINE = "underline"
    LINK = "link"
    TEXT_COLOR = "textColor"


class PanelType(Enum):
    """Kinds of coloured panels."""
    INFO = "info"
    NOTE = "note"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class Mark:
    """A single formatting mark. Only links carry href/title, only textColor carries color."""

    mark_type: MarkType
    href: Optional[str] = None
    title: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def link(cls, href: str, title: Optional[str] = None) -> "Mark":
        return cls(MarkType.LINK, href=href, title=title)

    @classmethod
    def text_color(cls, color: str) -> "Mark":
        return cls(MarkType.TEXT_COLOR, color=color)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.mark_type.value}
        if self.mark_type == MarkType.LINK:
            attrs: Dict[str, Any] = {"href": self.href or ""}
            if self.title:
                attrs["title"] = self.title
            result["attrs"] = attrs
        elif self.mark_type == MarkType.TEXT_COLOR:
            result["attrs"] = {"color": self.color or ""}
        return result


STRONG = Mark(MarkType.STRONG)
EMPHASIS = Mark(MarkType.EMPHASIS)
CODE = Mark(MarkType.CODE)
STRIKE = Mark(MarkType.STRIKE)
UNDERLINE = Mark(MarkType.UNDERLINE)


def merge_marks(marks: Iterable[Mark], *extra: Mark) -> Tuple[Mark, ...]:
    """
    Combine marks into an ordered, duplicate-free tuple.

    Outer marks come first. A mark already present keeps its original
    position, so nesting ``**__x__**`` still yields a single strong mark.
    """
    result = []
    for mark in list(marks) + list(extra):
        if mark not in result:
            result.append(mark)
    return tuple(result)


class Node:
    """Base class for all document nodes."""

    node_type: NodeType

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to its ADF dictionary representation."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.node_type.value})"


# Inline nodes


@dataclass(frozen=True, repr=False)
class Text(Node):
    """A run of text with a set of marks."""

    text: str
    marks: Tuple[Mark, ...] = ()
    node_type = NodeType.TEXT

    def has_mark(self, mark_type: MarkType) -> bool:
        return any(mark.mark_type == mark_type for mark in self.marks)

    def get_mark(self, mark_type: MarkType) -> Optional[Mark]:
        for mark in self.marks:
            if mark.mark_type == mark_type:
                return mark
        return None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.node_type.value, "text": self.text}
        if self.marks:
            result["marks"] = [mark.to_dict() for mark in self.marks]
        return result

    def __repr__(self) -> str:
        marks = ",".join(mark.mark_type.value for mark in self.marks)
        return f"Text({self.text!r}, marks=[{marks}])"


@dataclass(frozen=True, repr=False)
class HardBreak(Node):
    """Explicit line break inside a block."""

    node_type = NodeType.HARD_BREAK

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.node_type.value}


Inline = Union[Text, HardBreak]


# Block nodes


@dataclass(frozen=True, repr=False)
class Paragraph(Node):
    """Paragraph node containing inline elements."""

    content: Tuple[Inline, ...] = ()
    node_type = NodeType.PARAGRAPH

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "content": [child.to_dict() for child in self.content],
        }


@dataclass(frozen=True, repr=False)
class Heading(Node):
    """Heading node with level (1-6)."""

    level: int
    content: Tuple[Inline, ...] = ()
    node_type = NodeType.HEADING

    def __post_init__(self):
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {self.level}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "attrs": {"level": self.level},
            "content": [child.to_dict() for child in self.content],
        }

    def __repr__(self) -> str:
        return f"Heading(level={self.level})"


@dataclass(frozen=True, repr=False)
class CodeBlock(Node):
    """Code block with raw, never inline-parsed text."""

    text: str
    language: Optional[str] = None
    node_type = NodeType.CODE_BLOCK

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.node_type.value}
        if self.language:
            result["attrs"] = {"language": self.language}
        # ADF forbids empty text nodes
        result["content"] = [Text(self.text).to_dict()] if self.text else []
        return result


@dataclass(frozen=True, repr=False)
class ListItem(Node):
    """List item node that can contain block elements."""

    content: Tuple["Block", ...] = ()
    node_type = NodeType.LIST_ITEM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "content": [child.to_dict() for child in self.content],
        }


@dataclass(frozen=True, repr=False)
class BulletList(Node):
    """Unordered list."""

    items: Tuple[ListItem, ...] = ()
    node_type = NodeType.BULLET_LIST

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "content": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True, repr=False)
class OrderedList(Node):
    """Ordered list. Items are always numbered 1..n when emitted."""

    items: Tuple[ListItem, ...] = ()
    node_type = NodeType.ORDERED_LIST

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "content": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True, repr=False)
class Blockquote(Node):
    """Block quote node that can contain other block elements."""

    content: Tuple["Block", ...] = ()
    node_type = NodeType.BLOCKQUOTE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "content": [child.to_dict() for child in self.content],
        }


@dataclass(frozen=True, repr=False)
class Rule(Node):
    """Horizontal rule node."""

    node_type = NodeType.RULE

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.node_type.value}


@dataclass(frozen=True, repr=False)
class Panel(Node):
    """Coloured panel. Exists only in the structured document format."""

    panel_type: PanelType
    content: Tuple["Block", ...] = ()
    node_type = NodeType.PANEL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "attrs": {"panelType": self.panel_type.value},
            "content": [child.to_dict() for child in self.content],
        }


Block = Union[Paragraph, Heading, CodeBlock, BulletList, OrderedList, ListItem, Blockquote, Rule, Panel]


@dataclass(frozen=True, repr=False)
class Document(Node):
    """Root document node. Never empty: no blocks means one empty paragraph."""

    content: Tuple[Block, ...] = field(default_factory=tuple)
    node_type = NodeType.DOCUMENT

    def __post_init__(self):
        content = tuple(self.content)
        if not content:
            content = (Paragraph(),)
        object.__setattr__(self, "content", content)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.node_type.value,
            "version": ADF_VERSION,
            "content": [child.to_dict() for child in self.content],
        }

    def __repr__(self) -> str:
        return f"Document(blocks={len(self.content)})"


def plain_text(nodes: Iterable[Inline]) -> str:
    """Concatenate inline nodes into plain text, hard breaks become newlines."""
    parts = []
    for node in nodes:
        if isinstance(node, Text):
            parts.append(node.text)
        elif isinstance(node, HardBreak):
            parts.append("\n")
    return "".join(parts)
