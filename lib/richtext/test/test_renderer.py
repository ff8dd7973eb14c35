"""
Tests for the Markdown, wiki and HTML renderers.
"""

import unittest

from lib.richtext import (
    DisplayProjector,
    GrammarRegistry,
    HTMLRenderer,
    MarkdownRenderer,
    WikiRenderer,
    document_to_markdown,
    markdown_to_html,
    markdown_to_wiki,
    normalize_markdown,
)
from lib.richtext.ast_nodes import (
    CODE,
    EMPHASIS,
    STRONG,
    UNDERLINE,
    BulletList,
    CodeBlock,
    Document,
    HardBreak,
    Heading,
    ListItem,
    Mark,
    OrderedList,
    Panel,
    PanelType,
    Paragraph,
    Text,
)


def _paragraph(*runs) -> Paragraph:
    return Paragraph(tuple(runs))


class TestMarkdownRenderer(unittest.TestCase):
    """Test rendering documents back to Markdown."""

    def setUp(self):
        self.renderer = MarkdownRenderer()

    def test_empty_document(self):
        self.assertEqual(self.renderer.render(Document()), "")

    def test_rejects_non_document(self):
        with self.assertRaises(ValueError):
            self.renderer.render(Paragraph())

    def test_blocks_separated_by_blank_line(self):
        document = Document((Heading(1, (Text("T"),)), _paragraph(Text("p")), CodeBlock("x", "sh")))
        self.assertEqual(self.renderer.render(document), "# T\n\np\n\n```sh\nx\n```")

    def test_hard_breaks(self):
        document = Document((_paragraph(Text("a"), HardBreak(), Text("b")),))
        self.assertEqual(self.renderer.render(document), "a\nb")

    def test_heading_hard_break_becomes_space(self):
        document = Document((Heading(2, (Text("a"), HardBreak(), Text("b"))),))
        self.assertEqual(self.renderer.render(document), "## a b")

    def test_code_mark_is_innermost(self):
        document = Document((_paragraph(Text("x", (CODE, STRONG))),))
        self.assertEqual(self.renderer.render(document), "**`x`**")

    def test_shared_marks_wrap_once(self):
        document = Document((_paragraph(Text("a", (STRONG,)), Text("b", (STRONG, EMPHASIS))),))
        self.assertEqual(self.renderer.render(document), "**a*b***")

    def test_emphasis_around_bold_uses_underscores(self):
        document = Document((_paragraph(Text("b ", (EMPHASIS,)), Text("c", (EMPHASIS, STRONG))),))
        self.assertEqual(self.renderer.render(document), "_b **c**_")

    def test_emphasis_keeps_asterisks_when_text_has_underscores(self):
        document = Document((_paragraph(Text("snake_case", (EMPHASIS,))),))
        self.assertEqual(self.renderer.render(document), "*snake_case*")

    def test_marks_without_markdown_form_dropped(self):
        document = Document((_paragraph(Text("u", (UNDERLINE,)), Text("c", (Mark.text_color("#ff0000"),))),))
        self.assertEqual(self.renderer.render(document), "uc")

    def test_panel(self):
        document = Document((Panel(PanelType.WARNING, (_paragraph(Text("Careful")),)),))
        self.assertEqual(self.renderer.render(document), "> ⚠️ Careful")
        self.assertEqual(MarkdownRenderer({"panel_emoji": False}).render(document), "> Careful")

    def test_nested_list_flattened(self):
        item = ListItem(
            (
                _paragraph(Text("parent")),
                BulletList((ListItem((_paragraph(Text("child")),)),)),
            )
        )
        document = Document((BulletList((item,)),))
        self.assertEqual(self.renderer.render(document), "- parent child")

    def test_code_block_in_list_item(self):
        item = ListItem((_paragraph(Text("run")), CodeBlock("make\ntest")))
        self.assertEqual(self.renderer.render(Document((OrderedList((item,)),))), "1. run `make test`")

    def test_document_to_markdown(self):
        document = Document((Panel(PanelType.INFO, (_paragraph(Text("i")),)),))
        self.assertEqual(document_to_markdown(document, panel_emoji=False), "> i")

    def test_normalize_markdown(self):
        self.assertEqual(normalize_markdown("*  a\n+ b\n\n\n7. c"), "- a\n- b\n\n1. c")


class TestWikiRenderer(unittest.TestCase):
    """Test rendering documents to Jira wiki markup."""

    def test_document(self):
        markdown = (
            "# T\n\n**b** _i_ ~~s~~ `c` [l](http://u)\n\n- a\n- b\n\n1. x\n\n> q\n\n---\n\n```py\nx\n```"
        )
        self.assertEqual(
            markdown_to_wiki(markdown),
            "h1. T\n\n*b* _i_ -s- {{c}} [l|http://u]\n\n* a\n* b\n\n# x\n\n{quote}\nq\n{quote}\n\n----\n\n"
            "{code:py}\nx\n{code}",
        )

    def test_text_escaped(self):
        self.assertEqual(markdown_to_wiki("a {b} [c] |"), "a \\{b\\} \\[c\\] \\|")

    def test_code_without_language(self):
        self.assertEqual(markdown_to_wiki("```\nx\n```"), "{code}\nx\n{code}")

    def test_panels(self):
        renderer = WikiRenderer()
        document = Document(
            (
                Panel(PanelType.SUCCESS, (_paragraph(Text("ok")),)),
                Panel(PanelType.ERROR, (_paragraph(Text("bad")),)),
            )
        )
        self.assertEqual(renderer.render(document), "{tip}\nok\n{tip}\n\n{panel:bgColor=#ffebe6}\nbad\n{panel}")

    def test_nested_lists(self):
        item = ListItem((_paragraph(Text("a")), OrderedList((ListItem((_paragraph(Text("b")),)),))))
        self.assertEqual(WikiRenderer().render(Document((BulletList((item,)),))), "* a\n*# b")

    def test_underline_and_color(self):
        document = Document((_paragraph(Text("u", (UNDERLINE,)), Text("c", (Mark.text_color("red"),))),))
        self.assertEqual(WikiRenderer().render(document), "+u+{color:red}c{color}")


class TestHTMLRenderer(unittest.TestCase):
    """Test rendering display trees to HTML."""

    def setUp(self):
        self.plain = DisplayProjector(registry=GrammarRegistry({}), highlight=False)

    def test_paragraph_escaped(self):
        self.assertEqual(markdown_to_html("**a** <b>", projector=self.plain), "<p><strong>a</strong> &lt;b&gt;</p>")

    def test_blocks(self):
        html = markdown_to_html("# T\n\n- a\n- *b*\n\n> q\n\n---", projector=self.plain)
        self.assertEqual(
            html,
            "<h1>T</h1>\n<ul>\n<li>a</li>\n<li><em>b</em></li>\n</ul>\n"
            "<blockquote>\n<p>q</p>\n</blockquote>\n<hr />",
        )

    def test_link_and_break(self):
        html = markdown_to_html('[x](http://a?b=1&c=2 "T")\ny', projector=self.plain)
        self.assertEqual(html, '<p><a href="http://a?b=1&amp;c=2" title="T">x</a><br />y</p>')

    def test_plain_code_block(self):
        html = markdown_to_html("```\n<tag>\n```", projector=self.plain)
        self.assertEqual(html, '<pre><code class="language-text">&lt;tag&gt;</code></pre>')

    def test_highlighted_code_block(self):
        html = markdown_to_html("```python\nx = 1\n```")
        self.assertTrue(html.startswith('<pre class="highlight"><code class="language-python">'))
        self.assertIn('<span class="n">x</span>', html)
        self.assertIn('<span class="mi">1</span>', html)

    def test_options(self):
        html = markdown_to_html(
            "```python\nx\n```", projector=self.plain, code_class_prefix="lang-", highlight_class="hl"
        )
        self.assertEqual(html, '<pre><code class="lang-python">x</code></pre>')

    def test_panel(self):
        document = Document((Panel(PanelType.NOTE, (_paragraph(Text("n")),)),))
        html = HTMLRenderer().render(self.plain.project(document))
        self.assertEqual(html, '<div class="panel panel-note">\n<p>n</p>\n</div>')

    def test_rejects_non_display_node(self):
        with self.assertRaises(ValueError):
            HTMLRenderer().render(Document())


if __name__ == "__main__":
    unittest.main()
