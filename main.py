"""
ticketdoc - convert ticket descriptions between Markdown, ADF, display trees,
HTML and Jira wiki markup.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from internal.config.manager import ConfigManager
from lib.logging_utils import initLogging
from lib.richtext import (
    Document,
    HTMLRenderer,
    WikiRenderer,
    document_from_adf,
    is_adf_document,
)
from lib.utils import jsonDumps

# Configure basic logging first
logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.WARNING)
logger = logging.getLogger(__name__)

INPUT_FORMATS = ["auto", "markdown", "adf"]
OUTPUT_FORMATS = ["adf", "markdown", "display", "html", "wiki"]


class TicketDocConverter:
    """Converter that wires configured engine objects together."""

    def __init__(self, configManager: ConfigManager):
        self.configManager = configManager
        self.parser = configManager.buildParser()
        self.markdownRenderer = configManager.buildMarkdownRenderer()
        self.projector = configManager.buildProjector()

    def detectFormat(self, text: str) -> str:
        fromFormat = "adf" if is_adf_document(text) else "markdown"
        logger.debug(f"Detected input format: {fromFormat}")
        return fromFormat

    def load(self, text: str, fromFormat: str = "auto") -> Document:
        """
        Read input text into a Document.

        Raises:
            AdfError: If ADF input is not a valid document
        """
        if fromFormat == "auto":
            fromFormat = self.detectFormat(text)

        if fromFormat == "adf":
            return document_from_adf(text)
        return self.parser.parse(text)

    def convert(self, text: str, fromFormat: str = "auto", toFormat: Optional[str] = None) -> str:
        """
        Convert text between formats.

        Args:
            text: Input text
            fromFormat: One of INPUT_FORMATS
            toFormat: One of OUTPUT_FORMATS; when omitted, Markdown input goes
                to ADF and ADF input goes to Markdown

        Returns:
            Converted text
        """
        if fromFormat == "auto":
            fromFormat = self.detectFormat(text)
        document = self.load(text, fromFormat)

        if toFormat is None:
            toFormat = "markdown" if fromFormat == "adf" else "adf"

        match toFormat:
            case "adf":
                return jsonDumps(document.to_dict(), indent=2)
            case "markdown":
                return self.markdownRenderer.render(document)
            case "display":
                return jsonDumps(self.projector.project(document).to_dict(), indent=2)
            case "html":
                return HTMLRenderer().render(self.projector.project(document))
            case "wiki":
                return WikiRenderer().render(document)
            case _:
                raise ValueError(f"Unknown output format: {toFormat}")


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="ticketdoc - convert ticket descriptions between Markdown, ADF, HTML and Jira wiki markup"
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to configuration file (default: built-in defaults)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        help="Directory to search for .toml config files recursively (can be specified multiple times)",
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Pretty-print loaded configuration and exit",
    )
    parser.add_argument(
        "--from",
        dest="from_format",
        choices=INPUT_FORMATS,
        default="auto",
        help="Input format (default: detect ADF JSON, otherwise Markdown)",
    )
    parser.add_argument(
        "--to",
        dest="to_format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: adf for Markdown input, markdown for ADF input)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file (default: stdout)",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        help="Input file (default: stdin)",
    )
    args = parser.parse_args(argv)

    if args.config is not None:
        args.config = os.path.abspath(args.config)
    if args.config_dir:
        args.config_dir = [os.path.abspath(dir_path) for dir_path in args.config_dir]

    return args


def prettyPrintConfig(configManager: ConfigManager):
    """Pretty-print the loaded configuration."""
    print("=== ticketdoc Configuration ===")
    print()
    print(jsonDumps(configManager.config, indent=2))
    print()
    print("=== Configuration loaded successfully ===")


def readInput(path: Optional[str]) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path, "rt", encoding="utf-8") as f:
        return f.read()


def writeOutput(path: Optional[str], text: str) -> None:
    if not text.endswith("\n"):
        text += "\n"
    if path is None or path == "-":
        sys.stdout.write(text)
        return
    with open(path, "wt", encoding="utf-8") as f:
        f.write(text)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = parse_arguments(argv)

    try:
        configManager = ConfigManager(configPath=args.config, configDirs=args.config_dir)

        if args.print_config:
            prettyPrintConfig(configManager)
            return

        initLogging(configManager.getLoggingConfig())

        converter = TicketDocConverter(configManager)
        result = converter.convert(readInput(args.input), args.from_format, args.to_format)
        writeOutput(args.output, result)
    except KeyboardInterrupt:
        logger.info("Conversion interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Conversion failed: {e}")
        logger.exception(e)
        sys.exit(1)


if __name__ == "__main__":
    main()
