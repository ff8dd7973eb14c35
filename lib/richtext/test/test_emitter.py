"""
Tests for the Markdown builder and inline helpers.
"""

import unittest

from lib.richtext.emitter import MarkdownBuilder, bold, code, italic, link, strikethrough


class TestInlineHelpers(unittest.TestCase):
    """Test inline formatting helpers."""

    def test_wrappers(self):
        self.assertEqual(bold("t"), "**t**")
        self.assertEqual(italic("t"), "*t*")
        self.assertEqual(strikethrough("t"), "~~t~~")

    def test_code_escapes(self):
        self.assertEqual(code("plain"), "`plain`")
        self.assertEqual(code("a`b\\c"), "`a\\`b\\\\c`")

    def test_empty_code_is_empty(self):
        """Test that an empty span is not emitted as two literal backticks."""
        self.assertEqual(code(""), "")
        self.assertEqual(MarkdownBuilder().paragraph("x" + code("") + "y").build(), "xy\n")

    def test_link(self):
        self.assertEqual(link("text", "https://example.com"), "[text](https://example.com)")
        self.assertEqual(link("text", "https://example.com", "Title"), '[text](https://example.com "Title")')

    def test_helpers_on_builder(self):
        self.assertEqual(MarkdownBuilder.bold("x"), "**x**")
        self.assertEqual(MarkdownBuilder().code("`"), "`\\``")


class TestMarkdownBuilder(unittest.TestCase):
    """Test block emission."""

    def setUp(self):
        self.builder = MarkdownBuilder()

    def test_heading(self):
        self.assertEqual(self.builder.heading("Title", 2).build(), "## Title\n")

    def test_heading_level_validation(self):
        with self.assertRaises(ValueError):
            self.builder.heading("x", 0)
        with self.assertRaises(ValueError):
            self.builder.heading("x", 7)

    def test_paragraph(self):
        self.assertEqual(MarkdownBuilder().paragraph("text").build(), "text\n")
        self.assertEqual(MarkdownBuilder().paragraph().build(), "\n")

    def test_code_block(self):
        self.assertEqual(self.builder.code_block("x = 1", "python").build(), "```python\nx = 1\n```\n")

    def test_code_block_without_language(self):
        self.assertEqual(self.builder.code_block("x").build(), "```\nx\n```\n")

    def test_code_block_fence_grows(self):
        """Test that code containing a fence line gets a longer fence."""
        self.assertEqual(MarkdownBuilder().code_block("```").build(), "````\n```\n````\n")
        self.assertEqual(MarkdownBuilder().code_block("a\n  `````\nb").build(), "``````\na\n  `````\nb\n``````\n")

    def test_blockquote(self):
        self.assertEqual(self.builder.blockquote("a\nb").build(), "> a\n> b\n")

    def test_horizontal_rule(self):
        self.assertEqual(self.builder.horizontal_rule().build(), "---\n")

    def test_lists(self):
        self.assertEqual(MarkdownBuilder().bullet_list(["a", "b"]).build(), "- a\n- b\n\n")
        self.assertEqual(MarkdownBuilder().ordered_list(["a", "b"]).build(), "1. a\n2. b\n\n")

    def test_table(self):
        self.assertEqual(
            self.builder.table(["A", "B"], [["1", "2"], ["3", "4"]]).build(),
            "| A | B |\n| --- | --- |\n| 1 | 2 |\n| 3 | 4 |\n\n",
        )

    def test_task_list_item(self):
        self.assertEqual(MarkdownBuilder().task_list_item("done", True).build(), "- [x] done\n")
        self.assertEqual(MarkdownBuilder().task_list_item("todo").build(), "- [ ] todo\n")

    def test_raw_and_line_break(self):
        self.assertEqual(self.builder.raw("a").line_break().raw("b").build(), "a  \nb")

    def test_chaining_and_clear(self):
        builder = self.builder.heading("T").paragraph("p")
        self.assertIs(builder, self.builder)
        self.assertEqual(builder.build(), "# T\np\n")
        self.assertEqual(builder.clear().build(), "")

    def test_no_escaping_of_plain_text(self):
        self.assertEqual(MarkdownBuilder().paragraph("*not italic*").build(), "*not italic*\n")


if __name__ == "__main__":
    unittest.main()
