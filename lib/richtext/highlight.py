"""
Syntax highlighting for code blocks, backed by Pygments.

The ``GrammarRegistry`` is built explicitly (usually once, through
``GrammarRegistry.default()``) and injected into the display projector.
It is read-only after construction.
"""

import logging
from functools import partial
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional

from pygments.lexer import Lexer
from pygments.lexers import find_lexer_class_by_name, get_lexer_by_name
from pygments.token import STANDARD_TYPES, _TokenType
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

LexerFactory = Callable[[], Lexer]

# Grammar name -> Pygments lexer alias
PYGMENTS_GRAMMARS: Dict[str, str] = {
    "typescript": "typescript",
    "javascript": "javascript",
    "python": "python",
    "java": "java",
    "kotlin": "kotlin",
    "scala": "scala",
    "groovy": "groovy",
    "c": "c",
    "cpp": "cpp",
    "csharp": "csharp",
    "objectivec": "objective-c",
    "go": "go",
    "rust": "rust",
    "swift": "swift",
    "dart": "dart",
    "ruby": "ruby",
    "php": "php",
    "perl": "perl",
    "lua": "lua",
    "r": "r",
    "elixir": "elixir",
    "erlang": "erlang",
    "haskell": "haskell",
    "clojure": "clojure",
    "bash": "bash",
    "powershell": "powershell",
    "json": "json",
    "yaml": "yaml",
    "toml": "toml",
    "ini": "ini",
    "xml": "xml",
    "markdown": "markdown",
    "sql": "sql",
    "graphql": "graphql",
    "css": "css",
    "scss": "scss",
    "less": "less",
    "diff": "diff",
    "dockerfile": "docker",
    "makefile": "make",
}


class HighlightError(Exception):
    """Raised when a grammar is unknown or fails on the given code."""


class HighlightToken(NamedTuple):
    """A highlighted slice of code. Token texts of one block concatenate to the code."""

    kind: str
    text: str
    css_class: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "text": self.text, "class": self.css_class}


def _css_class(token_type: _TokenType) -> str:
    """Short Pygments CSS class of a token type (closest known ancestor)."""
    while token_type not in STANDARD_TYPES:
        token_type = token_type.parent
    return STANDARD_TYPES[token_type]


def _token_kind(token_type: _TokenType) -> str:
    # Token.Keyword.Constant -> "Keyword.Constant"
    return ".".join(token_type) or "Text"


class GrammarRegistry:
    """
    Read-only table of grammars usable for highlighting.

    Args:
        grammars: Mapping of grammar name to a factory returning a Pygments lexer
    """

    _default: Optional["GrammarRegistry"] = None

    def __init__(self, grammars: Mapping[str, LexerFactory]):
        self._grammars = MappingProxyType(dict(grammars))

    @classmethod
    def default(cls) -> "GrammarRegistry":
        """
        Registry of every grammar in ``PYGMENTS_GRAMMARS`` available in the
        installed Pygments. Built on first use and shared afterwards.
        """
        if cls._default is None:
            grammars: Dict[str, LexerFactory] = {}
            for name, alias in PYGMENTS_GRAMMARS.items():
                try:
                    find_lexer_class_by_name(alias)
                except ClassNotFound:
                    logger.warning(f"Pygments has no lexer for {alias}, grammar {name} disabled")
                    continue
                # Keep code byte-exact: no newline stripping or appending
                grammars[name] = partial(get_lexer_by_name, alias, stripnl=False, ensurenl=False)
            cls._default = cls(grammars)
            logger.debug(f"Built grammar registry with {len(grammars)} grammars")
        return cls._default

    def is_registered(self, name: str) -> bool:
        return name in self._grammars

    def names(self) -> List[str]:
        return sorted(self._grammars)

    def highlight(self, name: str, code: str) -> List[HighlightToken]:
        """
        Split code into highlight tokens.

        Args:
            name: Grammar name
            code: Source code

        Returns:
            List of tokens whose texts concatenate to ``code``

        Raises:
            HighlightError: If the grammar is unknown or the lexer fails
        """
        factory = self._grammars.get(name)
        if factory is None:
            raise HighlightError(f"Unknown grammar: {name}")

        try:
            lexer = factory()
            tokens = [
                HighlightToken(_token_kind(token_type), value, _css_class(token_type))
                for token_type, value in lexer.get_tokens(code)
                if value
            ]
        except Exception as e:
            raise HighlightError(f"Highlighting {name} failed: {e}") from e

        if "".join(token.text for token in tokens) != code:
            raise HighlightError(f"Highlighting {name} did not reproduce the code")
        return tokens
