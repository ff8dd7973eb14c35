"""
Pytest configuration and common fixtures for ticketdoc tests.

All fixtures follow camelCase naming convention.
"""

import json
import logging
from pathlib import Path

import pytest

from lib.richtext import AdfBuilder, Paragraph, Text

# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture
def restoreRootLogger():
    """
    Restore root logger level and handlers after a test reconfigures logging.

    Yields:
        logging.Logger: The root logger
    """
    rootLogger = logging.getLogger()
    level = rootLogger.level
    handlers = rootLogger.handlers[:]
    yield rootLogger
    for handler in rootLogger.handlers[:]:
        if handler not in handlers:
            rootLogger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in rootLogger.handlers:
            rootLogger.addHandler(handler)
    rootLogger.setLevel(level)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def workDir(tmp_path: Path, monkeypatch) -> Path:
    """
    Run the test in an empty working directory, so no stray .env file is picked up.

    Returns:
        Path: Temporary directory set as current working directory
    """
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ============================================================================
# Test Data Fixtures
# ============================================================================


@pytest.fixture
def sampleMarkdown() -> str:
    """
    Provide a sample ticket description in Markdown.

    Returns:
        str: Markdown text
    """
    return (
        "# Login fails\n"
        "\n"
        "Steps to reproduce:\n"
        "\n"
        "1. Open **settings**\n"
        "2. Click `Save`\n"
        "\n"
        "> Seen on staging only\n"
        "\n"
        "```python\n"
        "raise ValueError('boom')\n"
        "```"
    )


@pytest.fixture
def sampleAdf() -> dict:
    """
    Provide a sample ADF document.

    Returns:
        dict: ADF payload
    """
    return (
        AdfBuilder()
        .heading("Release notes", 2)
        .bullet_list(["Faster parsing", "Fewer bugs"])
        .panel("warning", [Paragraph((Text("Restart required"),))])
        .build()
        .to_dict()
    )


@pytest.fixture
def sampleAdfJson(sampleAdf) -> str:
    """
    Provide the sample ADF document as JSON text.

    Returns:
        str: ADF JSON
    """
    return json.dumps(sampleAdf)
