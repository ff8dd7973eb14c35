"""
Language tables for code blocks.

``LANGUAGE_ALIASES`` maps the language tags people write after a code fence
to the grammar names known by the highlighter. ``EXTENSION_LANGUAGES`` maps
file extensions to the language codes a document-format code block accepts.
"""

from typing import Dict, Mapping, Optional

PLAIN_TEXT = "text"

# Alias -> grammar name
LANGUAGE_ALIASES: Dict[str, str] = {
    # TypeScript/JavaScript
    "typescript": "typescript",
    "ts": "typescript",
    "tsx": "typescript",
    "mts": "typescript",
    "javascript": "javascript",
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "node": "javascript",
    # Python
    "python": "python",
    "py": "python",
    "python3": "python",
    "py3": "python",
    # JVM
    "java": "java",
    "kotlin": "kotlin",
    "kt": "kotlin",
    "kts": "kotlin",
    "scala": "scala",
    "groovy": "groovy",
    # C family
    "c": "c",
    "h": "c",
    "c++": "cpp",
    "cpp": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "hpp": "cpp",
    "csharp": "csharp",
    "c#": "csharp",
    "cs": "csharp",
    "objective-c": "objectivec",
    "objc": "objectivec",
    # Other compiled languages
    "go": "go",
    "golang": "go",
    "rust": "rust",
    "rs": "rust",
    "swift": "swift",
    "dart": "dart",
    # Scripting
    "ruby": "ruby",
    "rb": "ruby",
    "php": "php",
    "perl": "perl",
    "pl": "perl",
    "lua": "lua",
    "r": "r",
    "elixir": "elixir",
    "ex": "elixir",
    "exs": "elixir",
    "erlang": "erlang",
    "erl": "erlang",
    "haskell": "haskell",
    "hs": "haskell",
    "clojure": "clojure",
    "clj": "clojure",
    # Shell
    "bash": "bash",
    "shell": "bash",
    "sh": "bash",
    "zsh": "bash",
    "console": "bash",
    "powershell": "powershell",
    "ps1": "powershell",
    # Data and markup
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "toml": "toml",
    "ini": "ini",
    "xml": "xml",
    "html": "xml",
    "htm": "xml",
    "svg": "xml",
    "markdown": "markdown",
    "md": "markdown",
    "sql": "sql",
    "graphql": "graphql",
    "gql": "graphql",
    "css": "css",
    "scss": "scss",
    "sass": "scss",
    "less": "less",
    "diff": "diff",
    "patch": "diff",
    "dockerfile": "dockerfile",
    "docker": "dockerfile",
    "makefile": "makefile",
    "make": "makefile",
    # Plain
    "text": PLAIN_TEXT,
    "txt": PLAIN_TEXT,
    "plaintext": PLAIN_TEXT,
    "plain": PLAIN_TEXT,
}

# File extension -> document-format code block language
EXTENSION_LANGUAGES: Dict[str, str] = {
    "ts": "typescript",
    "tsx": "tsx",
    "js": "javascript",
    "jsx": "jsx",
    "mjs": "javascript",
    "cjs": "javascript",
    "py": "python",
    "pyw": "python",
    "rb": "ruby",
    "go": "go",
    "rs": "rust",
    "java": "java",
    "kt": "kotlin",
    "kts": "kotlin",
    "scala": "scala",
    "c": "c",
    "h": "c",
    "cpp": "c++",
    "hpp": "c++",
    "cc": "c++",
    "cxx": "c++",
    "cs": "csharp",
    "swift": "swift",
    "m": "objective-c",
    "mm": "objective-c",
    "php": "php",
    "sh": "shell",
    "bash": "shell",
    "zsh": "shell",
    "fish": "shell",
    "html": "html",
    "htm": "html",
    "xml": "xml",
    "css": "css",
    "scss": "sass",
    "sass": "sass",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "sql": "sql",
    "ex": "elixir",
    "exs": "elixir",
    "erl": "erlang",
    "hs": "haskell",
    "clj": "clojure",
    "cljs": "clojure",
    "dart": "dart",
    "r": "r",
    "lua": "lua",
    "pl": "perl",
    "pm": "perl",
    "graphql": "graphql",
    "gql": "graphql",
    "ps1": "powershell",
    "psm1": "powershell",
}


def normalize_language(name: Optional[str], aliases: Optional[Mapping[str, str]] = None) -> str:
    """
    Resolve a code fence language tag to a grammar name.

    Args:
        name: Language tag as written by the author (case-insensitive)
        aliases: Extra aliases checked before the built-in table

    Returns:
        Grammar name, or ``"text"`` for missing or unknown tags
    """
    if not name:
        return PLAIN_TEXT
    key = name.strip().lower()
    if aliases and key in aliases:
        return aliases[key]
    return LANGUAGE_ALIASES.get(key, PLAIN_TEXT)


def language_from_extension(ext: str) -> str:
    """Map a file extension (with or without the dot) to a code block language, ``"text"`` if unknown."""
    return EXTENSION_LANGUAGES.get(ext.lower().lstrip("."), PLAIN_TEXT)
