"""
Test suite for lib/utils.py
"""

import json
import os
import tempfile
import unittest

from lib.utils import jsonDumps, load_dotenv


class TestJsonDumps(unittest.TestCase):

    def test_compact_by_default(self):
        """Test compact separators and sorted keys without indent"""
        self.assertEqual(jsonDumps({"b": 1, "a": [1, 2]}), '{"a":[1,2],"b":1}')

    def test_indent_is_not_compact(self):
        """Test that passing indent gives pretty-printed output"""
        self.assertEqual(jsonDumps({"a": 1}, indent=2), '{\n  "a": 1\n}')

    def test_unicode_kept(self):
        self.assertEqual(jsonDumps("⚠️ панель"), '"⚠️ панель"')

    def test_non_serializable_uses_str(self):
        self.assertEqual(json.loads(jsonDumps({"v": object})), {"v": str(object)})


class TestLoadDotenv(unittest.TestCase):

    def setUp(self):
        self.tempDir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tempDir.name, ".env")
        self.addCleanup(self.tempDir.cleanup)

    def _write(self, content: str) -> None:
        with open(self.path, "wt") as f:
            f.write(content)

    def test_missing_file(self):
        self.assertEqual(load_dotenv(self.path), {})

    def test_parse(self):
        """Test comments, blank lines, quotes and '=' inside values"""
        self._write('# comment\n\nA=1\nB = "two words"\nC=x=y\ninvalid line\n')
        self.assertEqual(load_dotenv(self.path, populateEnv=False), {"A": "1", "B": "two words", "C": "x=y"})

    def test_populate_env_keeps_existing(self):
        self._write("TICKETDOC_TEST_NEW=new\nTICKETDOC_TEST_SET=file\n")
        os.environ["TICKETDOC_TEST_SET"] = "env"
        self.addCleanup(os.environ.pop, "TICKETDOC_TEST_SET", None)
        self.addCleanup(os.environ.pop, "TICKETDOC_TEST_NEW", None)

        load_dotenv(self.path)

        self.assertEqual(os.environ["TICKETDOC_TEST_NEW"], "new")
        self.assertEqual(os.environ["TICKETDOC_TEST_SET"], "env")


if __name__ == "__main__":
    unittest.main()
