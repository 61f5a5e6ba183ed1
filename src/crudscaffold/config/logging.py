"""Logging configuration for crudscaffold.

Everything logs under the ``crudscaffold`` logger. Console output goes to
stderr so ``generate`` output piped from stdout stays clean; the optional log
file gets the detailed format with source positions.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

from .settings import get_settings

PACKAGE_LOGGER = "crudscaffold"

CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def _parse_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(
            f"Unknown log level {level!r}; expected DEBUG, INFO, WARNING, ERROR or CRITICAL "
            f"(check CRUDSCAFFOLD_LOG_LEVEL)"
        )
    return value


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure the package logger, replacing any handlers from an earlier call.

    Args:
        level: Logging level name; defaults to ``Settings.log_level``
        log_file: Optional file receiving the detailed format; defaults to ``Settings.log_file``
        stream: Console stream (stderr if omitted)

    Returns:
        The configured ``crudscaffold`` logger

    Raises:
        ValueError: If the level name is not a logging level
    """
    settings = get_settings()
    log_level = _parse_level(level or settings.log_level)
    log_file_path = log_file or settings.log_file

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(log_level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    package_logger.addHandler(console_handler)

    if log_file_path:
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        package_logger.addHandler(file_handler)

    # Generated code and host applications keep their own root configuration
    package_logger.propagate = False
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger below ``crudscaffold``, configuring the package on first use.

    Args:
        name: Logger name (typically __name__)
    """
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        setup_logging()

    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
