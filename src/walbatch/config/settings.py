"""walbatch Settings Configuration Model.

Settings are read from environment variables (prefix ``WALBATCH_``,
nested with ``__``) and optionally from a TOML file. Values in the TOML
file are passed to the model as init arguments and therefore win over
environment variables.
"""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from walbatch.shared.constants import FileSystem, Logging
from walbatch.shared.errors import create_config_error

logger = logging.getLogger(__name__)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default=Logging.DEFAULT_LEVEL_NAME, description="Logging level")
    file: str | None = Field(default=None, description="Log file path (no file logging if unset)")
    max_bytes: int = Field(default=Logging.MAX_BYTES, gt=0, description="Maximum log file size in bytes")
    backup_count: int = Field(default=Logging.BACKUP_COUNT, ge=0, description="Number of backup log files to keep")
    console: bool = Field(default=True, description="Whether to log to the console")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            msg = f"Unknown logging level: {v}"
            raise ValueError(msg)
        return level


class ExecutionSettings(BaseModel):
    """Batch execution configuration."""

    chunk_size: int = Field(default=FileSystem.CHUNK_SIZE, gt=0, description="Copy buffer size in bytes")
    durable_data: bool = Field(default=True, description="fsync data files before a move deletes its source")
    durable_log: bool = Field(default=True, description="fsync the log after every record")
    rollback_on_log_failure: bool = Field(
        default=False,
        description="Roll back the batch when an 'executed' record cannot be written",
    )


class Settings(BaseSettings):
    """Top-level settings."""

    model_config = SettingsConfigDict(
        env_prefix="WALBATCH_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from a TOML file, the environment and defaults.

    Args:
        config_path: TOML file to read. When None, ``./walbatch.toml`` is
            used if it exists.

    Returns:
        Validated Settings instance.

    Raises:
        ApplicationError: If the file is missing, not valid TOML, or fails validation.
    """
    if config_path is None:
        candidate = Path.cwd() / FileSystem.CONFIG_FILE_NAME
        path = candidate if candidate.is_file() else None
    else:
        path = Path(config_path)

    data: dict = {}
    if path is not None:
        try:
            data = toml.load(path)
        except FileNotFoundError as e:
            raise create_config_error(
                f"Configuration file not found: {path}",
                operation="load_settings",
                original_error=e,
            ) from e
        except (toml.TomlDecodeError, OSError) as e:
            raise create_config_error(
                f"Cannot read configuration file {path}: {e}",
                operation="load_settings",
                original_error=e,
            ) from e
        logger.debug("Loaded configuration from %s", path)

    try:
        return Settings(**data)
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ()))
        raise create_config_error(
            f"Invalid configuration: {e}",
            config_key=key or None,
            operation="load_settings",
            original_error=e,
        ) from e


__all__ = [
    "ExecutionSettings",
    "LoggingSettings",
    "Settings",
    "load_settings",
]
