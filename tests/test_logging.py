"""
Tests for logging configuration module.
"""

import io
import logging
import tempfile
from pathlib import Path

import pytest

from nvm_upgrade.common import vlog
from nvm_upgrade.logging_config import (
    setup_logging,
    get_logger,
    ColoredFormatter,
)


def console_handlers(logger):
    return [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]


class TestSetupLogging:
    """Test logging setup and configuration."""

    def test_setup_logging_default(self):
        """Test default logging setup."""
        logger = setup_logging()
        assert logger.name == "nvm_upgrade"
        assert logger.level == logging.INFO

    def test_setup_logging_verbose(self):
        """Test verbose logging enables DEBUG level."""
        logger = setup_logging(verbose=True)
        assert logger.level == logging.DEBUG

    def test_setup_logging_quiet(self):
        """Test quiet mode keeps only warnings on the console."""
        logger = setup_logging(quiet=True)
        handlers = console_handlers(logger)
        assert len(handlers) == 1
        assert handlers[0].level == logging.WARNING

    def test_setup_logging_with_file(self):
        """Test logging to file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "upgrade.log"
            logger = setup_logging(log_file=str(log_file))

            file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
            assert len(file_handlers) == 1

            logger.debug("Debug detail")
            logger.info("Test message")
            for handler in file_handlers:
                handler.close()

            content = log_file.read_text()
            assert "Test message" in content
            assert "Debug detail" in content
            assert "[INFO] nvm_upgrade: Test message" in content

    def test_setup_logging_creates_log_directory(self):
        """Test that log directory is created if it doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "subdir" / "upgrade.log"
            logger = setup_logging(log_file=str(log_file))

            logger.info("Test")
            for handler in logger.handlers:
                if isinstance(handler, logging.FileHandler):
                    handler.close()
            assert log_file.exists()

    def test_setup_logging_custom_level(self):
        """Test custom log level."""
        logger = setup_logging(level="WARNING")
        assert logger.level == logging.WARNING

    def test_setup_logging_replaces_handlers(self):
        """Test repeated setup does not stack handlers."""
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_console_stream(self):
        """Test console records go to the given stream with bracketed levels."""
        stream = io.StringIO()
        logger = setup_logging(stream=stream)
        logger.warning("Could not connect to https://nodejs.org/dist")
        assert "[WARNING] Could not connect to https://nodejs.org/dist" in stream.getvalue()

    def test_console_respects_level(self):
        """Test records below the console level are dropped."""
        stream = io.StringIO()
        logger = setup_logging(quiet=True, stream=stream)
        logger.info("Checking nvm...")
        assert stream.getvalue() == ""

    def test_unknown_level(self):
        """Test unknown level names are rejected."""
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging(level="LOUD")

    def test_module_loggers_are_children(self):
        """Test module loggers propagate into the configured logger."""
        setup_logging()
        assert logging.getLogger("nvm_upgrade.installer").parent is logging.getLogger("nvm_upgrade")


class TestGetLogger:
    """Test get_logger()."""

    def test_get_logger(self):
        """Test the configured logger is returned."""
        configured = setup_logging()
        assert get_logger() is configured


class TestColoredFormatter:
    """Test ColoredFormatter."""

    def _record(self, level=logging.ERROR):
        return logging.LogRecord("nvm_upgrade", level, __file__, 1, "Something failed", None, None)

    def test_format_with_colors(self):
        """Test level names are colored."""
        formatter = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=True)
        output = formatter.format(self._record())
        assert output == "\033[31m[ERROR]\033[0m Something failed"

    def test_format_without_colors(self):
        """Test plain level names."""
        formatter = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=False)
        assert formatter.format(self._record(logging.WARNING)) == "[WARNING] Something failed"


class TestVlog:
    """Test verbose logging helper."""

    def test_vlog_verbose(self, caplog):
        """Test messages are logged in verbose mode."""
        setup_logging(verbose=True, propagate=True)
        with caplog.at_level(logging.DEBUG, logger="nvm_upgrade"):
            vlog("probing", verbose=True)
        assert "probing" in caplog.text

    def test_vlog_silent(self, caplog, monkeypatch):
        """Test messages are dropped without verbose mode."""
        monkeypatch.delenv("NVM_UPGRADE_DEBUG", raising=False)
        setup_logging(verbose=True, propagate=True)
        with caplog.at_level(logging.DEBUG, logger="nvm_upgrade"):
            vlog("probing", verbose=False)
        assert "probing" not in caplog.text

    def test_vlog_debug_env(self, caplog, monkeypatch):
        """Test NVM_UPGRADE_DEBUG=1 enables messages."""
        monkeypatch.setenv("NVM_UPGRADE_DEBUG", "1")
        setup_logging(verbose=True, propagate=True)
        with caplog.at_level(logging.DEBUG, logger="nvm_upgrade"):
            vlog("probing")
        assert "probing" in caplog.text
