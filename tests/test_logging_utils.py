"""
Tests for logging configuration helpers.
"""

import logging
from logging.handlers import TimedRotatingFileHandler

import pytest

from lib.logging_utils import configureLogger, getLogLevelByStr, initLogging


@pytest.fixture
def localLogger():
    """Provide a dedicated logger and clean it up afterwards."""
    testLogger = logging.getLogger("ticketdoc.test.logging")
    yield testLogger
    for handler in testLogger.handlers[:]:
        testLogger.removeHandler(handler)
        handler.close()
    testLogger.setLevel(logging.NOTSET)
    testLogger.propagate = True


class TestGetLogLevelByStr:
    """Test log level name resolution."""

    def testKnownLevels(self):
        assert getLogLevelByStr("DEBUG") == logging.DEBUG
        assert getLogLevelByStr("warning") == logging.WARNING

    def testUnknownLevel(self):
        assert getLogLevelByStr("LOUD") is None
        assert getLogLevelByStr("LOUD", logging.INFO) == logging.INFO

    def testNonLevelAttribute(self):
        """Test that logging module attributes which are not levels are rejected."""
        assert getLogLevelByStr("basic_format") is None


class TestConfigureLogger:
    """Test configuring a single logger."""

    def testLevelAndConsole(self, localLogger):
        configureLogger(localLogger, {"level": "DEBUG", "console": True})

        assert localLogger.level == logging.DEBUG
        assert len(localLogger.handlers) == 1
        assert isinstance(localLogger.handlers[0], logging.StreamHandler)

    def testConsoleLevel(self, localLogger):
        configureLogger(localLogger, {"level": "DEBUG", "console": True, "console-level": "ERROR"})

        assert localLogger.handlers[0].level == logging.ERROR

    def testNoDuplicateHandlers(self, localLogger):
        configureLogger(localLogger, {"console": True})
        configureLogger(localLogger, {"console": True})

        assert len(localLogger.handlers) == 1

    def testPropagate(self, localLogger):
        configureLogger(localLogger, {"propagate": False})

        assert localLogger.propagate is False

    def testFileHandler(self, localLogger, tmp_path):
        logFile = tmp_path / "logs" / "ticketdoc.log"

        configureLogger(localLogger, {"level": "INFO", "file": str(logFile)})
        localLogger.info("converted")
        for handler in localLogger.handlers:
            handler.flush()

        assert logFile.exists()
        assert "converted" in logFile.read_text(encoding="utf-8")

    def testRotatingFileHandler(self, localLogger, tmp_path):
        configureLogger(
            localLogger,
            {"file": str(tmp_path / "ticketdoc.log"), "rotate": True, "backup-count": 3, "file-level": "ERROR"},
        )

        handler = localLogger.handlers[0]
        assert isinstance(handler, TimedRotatingFileHandler)
        assert handler.backupCount == 3
        assert handler.level == logging.ERROR

    def testCustomFormat(self, localLogger):
        configureLogger(localLogger, {"console": True, "format": "%(levelname)s: %(message)s"})

        assert localLogger.handlers[0].formatter._fmt == "%(levelname)s: %(message)s"


class TestInitLogging:
    """Test configuring the root logger and named loggers."""

    def testRootAndNamedLoggers(self, restoreRootLogger, localLogger):
        initLogging(
            {
                "level": "ERROR",
                "console": True,
                "logger": {localLogger.name: {"level": "DEBUG"}},
            }
        )

        assert restoreRootLogger.level == logging.ERROR
        assert localLogger.level == logging.DEBUG

    def testInvalidLevelKeepsWarning(self, restoreRootLogger):
        initLogging({"level": "LOUD"})

        assert restoreRootLogger.level == logging.WARNING
