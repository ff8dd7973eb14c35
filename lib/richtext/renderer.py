"""
Renderers for the ticketdoc rich-text engine

This module converts Documents back to Markdown (through MarkdownBuilder)
and to Jira wiki markup, and renders display trees to HTML.
"""

import html
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

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
    Mark,
    MarkType,
    OrderedList,
    Panel,
    PanelType,
    Paragraph,
    Rule,
    Text,
)
from .display import DisplayKind, DisplayNode, DisplayProjector
from .emitter import MarkdownBuilder, bold, code, italic, link, strikethrough
from .escaping import escape_wiki
from .parser import MarkdownParser

logger = logging.getLogger(__name__)

PANEL_EMOJI: Dict[PanelType, str] = {
    PanelType.INFO: "ℹ️",
    PanelType.NOTE: "📝",
    PanelType.WARNING: "⚠️",
    PanelType.ERROR: "❌",
    PanelType.SUCCESS: "✅",
}

# Marks with a Markdown form; the rest are dropped
_MARKDOWN_MARKS = {MarkType.STRONG, MarkType.EMPHASIS, MarkType.CODE, MarkType.STRIKE, MarkType.LINK}


def _split_lines(nodes: Sequence[Inline]) -> List[List[Text]]:
    """Split inline content at hard breaks."""
    lines: List[List[Text]] = [[]]
    for node in nodes:
        if isinstance(node, HardBreak):
            lines.append([])
        elif isinstance(node, Text) and node.text:
            lines[-1].append(node)
    return lines


class MarkdownRenderer:
    """
    Renderer that converts a Document to Markdown.

    Blocks are written with MarkdownBuilder and separated by one blank line.
    Runs sharing an outer mark are wrapped together, so nested marks read
    back the same way. The code mark is always innermost.
    """

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        """Initialize the Markdown renderer."""
        self.options = options or {}
        self.panel_emoji = self.options.get("panel_emoji", True)

    def render(self, document: Document) -> str:
        """Render a Document to Markdown."""
        if not isinstance(document, Document):
            raise ValueError("Expected Document as root node")
        return self._render_blocks(document.content)

    def _render_blocks(self, blocks: Sequence[Block]) -> str:
        parts = [self._render_block(block) for block in blocks]
        return "\n\n".join(part for part in parts if part)

    def _render_block(self, node: Block) -> str:
        """Render a single block node back to Markdown."""
        builder = MarkdownBuilder()

        if isinstance(node, Heading):
            builder.heading(self._render_inline(node.content, " "), node.level)
        elif isinstance(node, Paragraph):
            builder.paragraph(self._render_inline(node.content))
        elif isinstance(node, CodeBlock):
            builder.code_block(node.text, node.language or "")
        elif isinstance(node, BulletList):
            builder.bullet_list([self._render_list_item(item) for item in node.items])
        elif isinstance(node, OrderedList):
            builder.ordered_list([self._render_list_item(item) for item in node.items])
        elif isinstance(node, Blockquote):
            builder.blockquote(self._render_blocks(node.content))
        elif isinstance(node, Panel):
            content = self._render_blocks(node.content)
            if self.panel_emoji:
                content = f"{PANEL_EMOJI[node.panel_type]} {content}"
            builder.blockquote(content)
        elif isinstance(node, Rule):
            builder.horizontal_rule()
        elif isinstance(node, ListItem):
            builder.paragraph(self._render_list_item(node))
        else:
            raise ValueError(f"Unsupported node type: {type(node).__name__}")

        return builder.build().rstrip("\n")

    def _render_list_item(self, node: ListItem) -> str:
        """List items hold one line of text, nested blocks are flattened into it."""
        return " ".join(part for part in (self._flatten(child) for child in node.content) if part)

    def _flatten(self, node: Block) -> str:
        if isinstance(node, (Paragraph, Heading)):
            return self._render_inline(node.content, " ")
        elif isinstance(node, CodeBlock):
            return code(node.text.replace("\n", " ")) if node.text else ""
        elif isinstance(node, (BulletList, OrderedList)):
            children = node.items
        elif isinstance(node, (ListItem, Blockquote, Panel)):
            children = node.content
        else:
            return ""
        return " ".join(part for part in (self._flatten(child) for child in children) if part)

    def _render_inline(self, nodes: Sequence[Inline], line_separator: str = "\n") -> str:
        return line_separator.join(self._render_runs(line, ()) for line in _split_lines(nodes))

    def _render_runs(self, runs: Sequence[Text], outer: Tuple[Mark, ...]) -> str:
        """
        Render runs of one line.

        The first pending mark of a run is opened and kept open over every
        following run that has it too; the group is rendered recursively with
        that mark excluded.
        """
        parts: List[str] = []
        index = 0
        while index < len(runs):
            run = runs[index]
            pending = [mark for mark in run.marks if mark.mark_type in _MARKDOWN_MARKS and mark not in outer]
            wrapping = [mark for mark in pending if mark.mark_type != MarkType.CODE]

            if not wrapping:
                parts.append(code(run.text) if pending else run.text)
                index += 1
                continue

            mark = wrapping[0]
            end = index
            while end < len(runs) and mark in runs[end].marks:
                end += 1
            inner = self._render_runs(runs[index:end], outer + (mark,))
            parts.append(self._wrap(mark, inner))
            index = end

        return "".join(parts)

    def _wrap(self, mark: Mark, text: str) -> str:
        if mark.mark_type == MarkType.STRONG:
            return bold(text)
        elif mark.mark_type == MarkType.EMPHASIS:
            # '*' emphasis cannot contain '*'
            if "*" in text and "_" not in text:
                return f"_{text}_"
            return italic(text)
        elif mark.mark_type == MarkType.STRIKE:
            return strikethrough(text)
        return link(text, mark.href or "", mark.title)


_WIKI_MARK_WRAPPERS: Dict[MarkType, Callable[[str, Mark], str]] = {
    MarkType.STRONG: lambda text, mark: f"*{text}*",
    MarkType.EMPHASIS: lambda text, mark: f"_{text}_",
    MarkType.STRIKE: lambda text, mark: f"-{text}-",
    MarkType.UNDERLINE: lambda text, mark: f"+{text}+",
    MarkType.TEXT_COLOR: lambda text, mark: f"{{color:{mark.color}}}{text}{{color}}",
    MarkType.LINK: lambda text, mark: f"[{text}|{mark.href}]",
}


class WikiRenderer:
    """
    Renderer that converts a Document to Jira wiki markup.

    Used for tracker instances that do not accept the structured format.
    """

    # Opening and closing macro per panel type
    PANEL_MACROS: Dict[PanelType, Tuple[str, str]] = {
        PanelType.INFO: ("{info}", "{info}"),
        PanelType.NOTE: ("{note}", "{note}"),
        PanelType.WARNING: ("{warning}", "{warning}"),
        PanelType.SUCCESS: ("{tip}", "{tip}"),
        PanelType.ERROR: ("{panel:bgColor=#ffebe6}", "{panel}"),
    }

    def render(self, document: Document) -> str:
        """Render a Document to wiki markup."""
        if not isinstance(document, Document):
            raise ValueError("Expected Document as root node")
        return self._render_blocks(document.content)

    def _render_blocks(self, blocks: Sequence[Block]) -> str:
        parts = [self._render_block(block) for block in blocks]
        return "\n\n".join(part for part in parts if part)

    def _render_block(self, node: Block) -> str:
        if isinstance(node, Heading):
            return f"h{node.level}. {self._render_inline(node.content, ' ')}"
        elif isinstance(node, Paragraph):
            return self._render_inline(node.content)
        elif isinstance(node, CodeBlock):
            opening = f"{{code:{node.language}}}" if node.language else "{code}"
            return f"{opening}\n{node.text}\n{{code}}"
        elif isinstance(node, (BulletList, OrderedList)):
            return "\n".join(self._render_list(node, ""))
        elif isinstance(node, Blockquote):
            return f"{{quote}}\n{self._render_blocks(node.content)}\n{{quote}}"
        elif isinstance(node, Panel):
            opening, closing = self.PANEL_MACROS[node.panel_type]
            return f"{opening}\n{self._render_blocks(node.content)}\n{closing}"
        elif isinstance(node, Rule):
            return "----"
        elif isinstance(node, ListItem):
            return self._render_blocks(node.content)
        else:
            raise ValueError(f"Unsupported node type: {type(node).__name__}")

    def _render_list(self, node, prefix: str) -> List[str]:
        """Render list lines; nesting repeats the marker (``**``, ``#*``...)."""
        marker = prefix + ("#" if isinstance(node, OrderedList) else "*")
        lines: List[str] = []
        for item in node.items:
            texts: List[str] = []
            nested: List[str] = []
            for child in item.content:
                if isinstance(child, (BulletList, OrderedList)):
                    nested.extend(self._render_list(child, marker))
                elif isinstance(child, (Paragraph, Heading)):
                    texts.append(self._render_inline(child.content, " "))
                else:
                    texts.append(self._render_block(child))
            lines.append(f"{marker} {' '.join(text for text in texts if text)}")
            lines.extend(nested)
        return lines

    def _render_inline(self, nodes: Sequence[Inline], line_separator: str = "\n") -> str:
        return line_separator.join(
            "".join(self._render_text(run) for run in line) for line in _split_lines(nodes)
        )

    def _render_text(self, node: Text) -> str:
        if node.has_mark(MarkType.CODE):
            text = f"{{{{{node.text}}}}}"
        else:
            text = escape_wiki(node.text)

        # Innermost mark is the last one
        for mark in reversed(node.marks):
            wrapper = _WIKI_MARK_WRAPPERS.get(mark.mark_type)
            if wrapper is not None:
                text = wrapper(text, mark)
        return text


class HTMLRenderer:
    """
    Renderer that converts a display tree to HTML.

    Highlighted code tokens become ``<span>`` elements carrying the short
    Pygments token class, so any Pygments stylesheet applies.
    """

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        """
        Initialize the HTML renderer.

        Args:
            options: Optional rendering configuration
        """
        self.options = options or {}

        # Default rendering options
        self.code_class_prefix = self.options.get("code_class_prefix", "language-")
        self.highlight_class = self.options.get("highlight_class", "highlight")

    def render(self, node: DisplayNode) -> str:
        """
        Render a display tree to HTML.

        Args:
            node: Root display node (usually of kind DOCUMENT)

        Returns:
            HTML string
        """
        if not isinstance(node, DisplayNode):
            raise ValueError("Expected DisplayNode as root node")
        return self._render_node(node)

    def _render_node(self, node: DisplayNode) -> str:
        """Render a single display node to HTML."""
        kind = node.kind
        if kind == DisplayKind.DOCUMENT:
            return "\n".join(self._render_node(child) for child in node.children)
        elif kind == DisplayKind.PARAGRAPH:
            return f"<p>{self._render_children(node)}</p>"
        elif kind == DisplayKind.HEADING:
            level = node.attrs.get("level", 1)
            return f"<h{level}>{self._render_children(node)}</h{level}>"
        elif kind == DisplayKind.CODE_BLOCK:
            return self._render_code_block(node)
        elif kind == DisplayKind.BULLET_LIST:
            return f"<ul>\n{self._render_block_children(node)}\n</ul>"
        elif kind == DisplayKind.ORDERED_LIST:
            return f"<ol>\n{self._render_block_children(node)}\n</ol>"
        elif kind == DisplayKind.LIST_ITEM:
            return f"<li>{self._render_list_item(node)}</li>"
        elif kind == DisplayKind.BLOCKQUOTE:
            return f"<blockquote>\n{self._render_block_children(node)}\n</blockquote>"
        elif kind == DisplayKind.PANEL:
            panel_type = self._escape_html(node.attrs.get("panel_type", "info"))
            return f'<div class="panel panel-{panel_type}">\n{self._render_block_children(node)}\n</div>'
        elif kind == DisplayKind.RULE:
            return "<hr />"
        elif kind == DisplayKind.HARD_BREAK:
            return "<br />"
        elif kind == DisplayKind.TEXT:
            return self._render_text(node)
        else:
            return f"<!-- Unknown node kind: {kind.value} -->"

    def _render_children(self, node: DisplayNode, separator: str = "") -> str:
        return separator.join(self._render_node(child) for child in node.children)

    def _render_block_children(self, node: DisplayNode) -> str:
        return self._render_children(node, "\n")

    def _render_list_item(self, node: DisplayNode) -> str:
        # Single paragraph items are rendered without <p>
        if len(node.children) == 1 and node.children[0].kind == DisplayKind.PARAGRAPH:
            return self._render_children(node.children[0])
        return self._render_block_children(node)

    def _render_code_block(self, node: DisplayNode) -> str:
        language = node.language or "text"
        class_attr = f' class="{self.code_class_prefix}{self._escape_html(language)}"'

        if node.tokens is None:
            content = self._escape_html(node.text or "")
            return f"<pre><code{class_attr}>{content}</code></pre>"

        spans = []
        for token in node.tokens:
            value = self._escape_html(token.text)
            spans.append(f'<span class="{token.css_class}">{value}</span>' if token.css_class else value)
        return f'<pre class="{self.highlight_class}"><code{class_attr}>{"".join(spans)}</code></pre>'

    def _render_text(self, node: DisplayNode) -> str:
        text = self._escape_html(node.text or "")
        tags = {
            MarkType.STRONG.value: "strong",
            MarkType.EMPHASIS.value: "em",
            MarkType.CODE.value: "code",
            MarkType.STRIKE.value: "del",
            MarkType.UNDERLINE.value: "u",
        }
        for style in reversed(node.styles):
            if style in tags:
                text = f"<{tags[style]}>{text}</{tags[style]}>"
            elif style == MarkType.TEXT_COLOR.value:
                text = f'<span style="color: {self._escape_html(node.attrs.get("color", ""))}">{text}</span>'
            elif style == MarkType.LINK.value:
                title = node.attrs.get("title")
                title_attr = f' title="{self._escape_html(title)}"' if title else ""
                text = f'<a href="{self._escape_html(node.attrs.get("href", ""))}"{title_attr}>{text}</a>'
        return text

    def _escape_html(self, text: str) -> str:
        """Escape HTML special characters."""
        return html.escape(text, quote=True)


# Convenience functions


def document_to_markdown(document: Document, **options) -> str:
    """
    Render a Document to Markdown.

    Args:
        document: Document to render
        **options: Renderer options (``panel_emoji``)

    Returns:
        Markdown string
    """
    return MarkdownRenderer(options).render(document)


def normalize_markdown(text: str, **options) -> str:
    """
    Normalize Markdown text by parsing and re-rendering.

    Args:
        text: Markdown text to normalize
        **options: Parser and renderer options

    Returns:
        Normalized Markdown string
    """
    document = MarkdownParser(options).parse(text)
    return MarkdownRenderer(options).render(document)


def markdown_to_wiki(text: str, **options) -> str:
    """
    Convert Markdown text to Jira wiki markup.

    Args:
        text: Markdown text to convert
        **options: Parser options

    Returns:
        Wiki markup string
    """
    document = MarkdownParser(options).parse(text)
    return WikiRenderer().render(document)


def markdown_to_display(text: str, projector: Optional[DisplayProjector] = None) -> DisplayNode:
    """
    Convert Markdown text to a display tree.

    Args:
        text: Markdown text to convert
        projector: Projector to use, a default one when omitted

    Returns:
        DisplayNode of kind DOCUMENT
    """
    projector = projector if projector is not None else DisplayProjector()
    return projector.project(text)


def markdown_to_html(text: str, projector: Optional[DisplayProjector] = None, **options) -> str:
    """
    Convert Markdown text to HTML, with highlighted code blocks.

    Args:
        text: Markdown text to convert
        projector: Projector to use, a default one when omitted
        **options: HTMLRenderer options

    Returns:
        HTML string
    """
    return HTMLRenderer(options).render(markdown_to_display(text, projector))
