"""
Logging Configuration Module

This module provides centralized logging configuration for walbatch.
Console output goes through Rich; file output uses a rotating handler.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from walbatch.config.settings import LoggingSettings
from walbatch.shared.constants import Logging

ROOT_LOGGER_NAME = "walbatch"


def setup_logging(
    log_level: int | str = Logging.DEFAULT_LEVEL,
    log_file: str | Path | None = None,
    *,
    console_output: bool = True,
    max_bytes: int = Logging.MAX_BYTES,
    backup_count: int = Logging.BACKUP_COUNT,
    console: Console | None = None,
) -> logging.Logger:
    """
    Set up logging for the walbatch package logger.

    Args:
        log_level: Logging level (int or name)
        log_file: Log file path; no file handler if None
        console_output: Whether to output logs to the console
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        console: Rich console used for console output (stderr by default)

    Returns:
        Configured ``walbatch`` logger
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)
    cleanup_logging(logger)

    if console_output:
        console_handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter("%(message)s", Logging.DATE_FORMAT))
        logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(Logging.DETAILED_FORMAT, Logging.DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_settings(
    settings: LoggingSettings,
    *,
    level_override: str | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Configure logging from a LoggingSettings section."""
    return setup_logging(
        level_override or settings.level,
        settings.file,
        console_output=settings.console,
        max_bytes=settings.max_bytes,
        backup_count=settings.backup_count,
        console=console,
    )


def cleanup_logging(logger: logging.Logger | None = None) -> None:
    """
    Close and remove all handlers of a logger.

    Args:
        logger: Logger to clean up (defaults to the walbatch logger)
    """
    if logger is None:
        logger = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
