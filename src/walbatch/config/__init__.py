"""Configuration for walbatch."""

from walbatch.config.settings import (
    ExecutionSettings,
    LoggingSettings,
    Settings,
    load_settings,
)

__all__ = [
    "ExecutionSettings",
    "LoggingSettings",
    "Settings",
    "load_settings",
]
