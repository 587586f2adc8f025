"""
Logging setup for nvm-upgrade.

Progress messages go to the console. The optional log file keeps the full
DEBUG trace of every nvm, node and helper command, which is what you want
when an upgrade fails halfway.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO


LOGGER_NAME = "nvm_upgrade"
CONSOLE_FORMAT = "%(asctime)s %(levelname_colored)s %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_logger: Optional[logging.Logger] = None


def _resolve_level(level: str, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def _console_handler(level: int, stream: TextIO) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    isatty = getattr(stream, "isatty", None)
    handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, use_colors=bool(isatty and isatty())))
    return handler


def _file_handler(log_file: str) -> logging.Handler:
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    propagate: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure the ``nvm_upgrade`` logger.

    Calling this again replaces the previous handlers.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Also write every record, including DEBUG, to this file
        verbose: Show DEBUG output on the console
        quiet: Only show warnings and errors on the console
        propagate: Pass records on to the root logger (used by tests)
        stream: Console stream (defaults to sys.stdout)

    Returns:
        Configured logger

    Raises:
        ValueError: If level is not a known level name
    """
    global _logger

    console_level = _resolve_level(level, verbose, quiet)
    logger = logging.getLogger(LOGGER_NAME)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(console_level, stream or sys.stdout))
    if log_file:
        logger.addHandler(_file_handler(log_file))

    # The file handler filters nothing, so the logger must pass DEBUG through
    logger.setLevel(logging.DEBUG if log_file else console_level)
    logger.propagate = propagate

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Return the configured logger, setting up defaults on first use."""
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


class ColoredFormatter(logging.Formatter):
    """
    Adds ``levelname_colored``: the level in brackets, colored on terminals.
    """

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[1;31m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str, use_colors: bool = True):
        super().__init__(fmt, datefmt="%H:%M:%S")
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        label = f"[{record.levelname}]"
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        record.levelname_colored = f"{color}{label}{self.RESET}" if color else label
        return super().format(record)
