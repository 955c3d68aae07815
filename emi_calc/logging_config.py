"""Logging configuration for emi_calc.

Every module logs through a child of the ``"emi_calc"`` logger. The package
logger is configured from environment variables on first import and can be
reconfigured programmatically (the CLI does so for ``--log-level``).
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "emi_calc"

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Environment variable names
ENV_LOG_LEVEL = "EMI_CALC_LOG_LEVEL"
ENV_LOG_FILE = "EMI_CALC_LOG_FILE"
ENV_LOG_FORMAT = "EMI_CALC_LOG_FORMAT"


def _resolve_level(level: Optional[str]) -> int:
    level_str = level or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL
    return getattr(logging, level_str.upper(), logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package logger.

    Args:
        name: Name of the logger (typically ``__name__`` of the calling module)

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Simulating %d months", 240)
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    console: bool = True,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """Configure handlers and level of the package logger.

    Args:
        level: Logging level name. Defaults to ``EMI_CALC_LOG_LEVEL`` or WARNING.
        log_file: Path of a rotating log file. Defaults to ``EMI_CALC_LOG_FILE``;
                  no file is written when neither is set.
        console: Whether to log to stderr.
        max_bytes: Size at which the log file is rotated.
        backup_count: Number of rotated files to keep.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()

    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    formatter = logging.Formatter(os.getenv(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT), datefmt=DEFAULT_DATE_FORMAT)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    log_file_path = log_file or os.getenv(ENV_LOG_FILE)
    if log_file_path:
        Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False


def disable_logging() -> None:
    """Silence all emi_calc logging."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


if not logging.getLogger(PACKAGE_LOGGER).handlers:
    configure_logging()
