"""
Shared constants for walbatch.

This module groups the application-wide constants used by the core
engine, the logging setup and the CLI.
"""

from __future__ import annotations

import logging


class Application:
    """Application metadata."""

    NAME = "walbatch"
    VERSION = "0.1.0"
    DESCRIPTION = "Run file moves and copies as a logged, all-or-nothing batch"


class FileSystem:
    """File system constants."""

    # Buffer size used when streaming bytes between files
    CHUNK_SIZE = 1024 * 1024  # 1MB
    CONFIG_FILE_NAME = "walbatch.toml"
    DEFAULT_WAL_NAME = "wal.jsonl"


class WalRecordTypes:
    """Record type tags written to the log."""

    BATCH_START = "batch_start"
    STATUS_UPDATE = "status_update"


class Logging:
    """Logging configuration constants."""

    DEFAULT_LEVEL = logging.INFO
    DEFAULT_LEVEL_NAME = "INFO"
    DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
    MAX_BYTES = 10 * 1024 * 1024  # 10MB
    BACKUP_COUNT = 5


class CLIDefaults:
    """CLI exit codes and defaults."""

    EXIT_ERROR = 1
    EXIT_USAGE_ERROR = 2


class CLICommands:
    """CLI command names."""

    RUN = "run"
    SHOW = "show"


class CLIHelp:
    """CLI help texts."""

    APP_NAME = Application.NAME
    APP_DESCRIPTION = Application.DESCRIPTION
    APP_STYLE = "rich"
    VERSION_TEXT = "walbatch v{version}"
    RUN_HELP = "Execute the operations listed in a plan file as one batch."
    RUN_PLAN_HELP = "Plan file (.json or .toml) listing the operations to run."
    RUN_WAL_HELP = "Log destination. Overrides wal_path from the plan file."
    CONFIG_HELP = "Configuration file (TOML). Defaults to ./walbatch.toml if present."
    SHOW_HELP = "Print the records of a batch log in order."
    SHOW_WAL_HELP = "Log file to read."
    JSON_HELP = "Enable machine-readable JSON output instead of human-readable format."


__all__ = [
    "Application",
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
    "FileSystem",
    "Logging",
    "WalRecordTypes",
]
