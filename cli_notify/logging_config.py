"""
Logging setup for the notifier.

Module loggers (``logging.getLogger(__name__)``) are children of the
``cli_notify`` logger configured here. The notice itself is printed by the
host CLI on stdout; diagnostics (outdated npm, registry failures, verbose
traces) go to stderr and, optionally, a log file.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "cli_notify"

CONSOLE_FORMAT = "%(levelname_colored)s %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_logger: Optional[logging.Logger] = None


def _effective_level(level: str, verbose: bool, quiet: bool) -> int:
    if verbose or os.environ.get("CLI_NOTIFY_DEBUG", "0") == "1":
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.getLevelName(level.upper())


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure the ``cli_notify`` logger, replacing earlier handlers.

    Args:
        level: Console log level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file receiving every record at DEBUG level
        verbose: Log at DEBUG (also enabled by CLI_NOTIFY_DEBUG=1)
        quiet: No console output; the host CLI's own output stays clean
        propagate: Pass records to the root logger (pytest's caplog needs this)

    Returns:
        Configured logger instance
    """
    global _logger

    console_level = _effective_level(level, verbose, quiet)

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG if log_file else console_level)

    if not quiet:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, use_colors=sys.stderr.isatty()))
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    if not logger.handlers:
        # Keeps logging's last-resort stderr handler from printing in quiet mode
        logger.addHandler(logging.NullHandler())

    logger.propagate = propagate

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Return the notifier logger, configuring defaults on first use."""
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


class ColoredFormatter(logging.Formatter):
    """
    Level-colored console formatter; plain level names when colors are off.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    SYMBOLS = {
        "DEBUG": "·",
        "INFO": "✓",
        "WARNING": "⚠",
        "ERROR": "✗",
        "CRITICAL": "✗",
    }

    def __init__(self, fmt: str = CONSOLE_FORMAT, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if self.use_colors and levelname in self.COLORS:
            record.levelname_colored = f"{self.COLORS[levelname]}{self.SYMBOLS[levelname]} {levelname}{self.RESET}"
        else:
            record.levelname_colored = levelname
        return super().format(record)
