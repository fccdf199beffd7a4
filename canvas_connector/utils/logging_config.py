"""Logging configuration for the Canvas connector."""

import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "canvas_connector"

CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(module)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s.%(module)s:%(lineno)d %(message)s"


def _resolve_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _stderr_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    name: str = LOGGER_NAME,
) -> logging.Logger:
    """
    Configure the connector logger.

    Stdout carries command and tool output, so console logs go to stderr.
    Calling this again replaces the handlers installed by a previous call.

    Args:
        level: Logging level name; unknown names fall back to INFO
        log_file: Optional path of a log file to write as well
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_stderr_handler())
    if log_file:
        logger.addHandler(_file_handler(Path(log_file)))

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Return the named logger; modules call this at import time."""
    return logging.getLogger(name)
