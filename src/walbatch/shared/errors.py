"""walbatch Error Handling Module

This module defines the error handling system for walbatch, providing
structured error classes with context information and user-friendly messages.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Proper Exception Chaining: Original exceptions are preserved
- I/O failures stay catchable as OSError (FileOperationError, WalWriteError)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Error codes for walbatch.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # File System Errors
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    FILE_WRITE_ERROR = "FILE_WRITE_ERROR"
    FILE_DELETE_ERROR = "FILE_DELETE_ERROR"
    INVALID_PATH = "INVALID_PATH"

    # Write-ahead log Errors
    WAL_WRITE_FAILED = "WAL_WRITE_FAILED"
    WAL_CORRUPTED = "WAL_CORRUPTED"

    # Batch Errors
    BATCH_ROLLED_BACK = "BATCH_ROLLED_BACK"

    # Configuration Errors
    CONFIG_INVALID = "CONFIG_INVALID"
    PLAN_INVALID = "PLAN_INVALID"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path and Enum to primitive types.

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are kept in
    additional_data so that the context can always be serialized.

    Attributes:
        file_path: Optional file path associated with the error
        operation: Optional operation name that caused the error
        additional_data: Optional dict with primitive values only
    """

    file_path: str | None = None
    operation: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self) -> dict[str, Any]:
        """Export context as a dict; additional_data is never None."""
        data: dict[str, Any] = {}
        if self.file_path is not None:
            data["file_path"] = self.file_path
        if self.operation is not None:
            data["operation"] = self.operation
        data["additional_data"] = self.additional_data or {}
        return data


class WalBatchError(Exception):
    """Base exception class for all walbatch errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize WalBatchError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error
        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging and JSON output."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(WalBatchError):
    """Errors raised when inputs violate the rules of the batch model."""


class InfrastructureError(WalBatchError):
    """Errors raised while talking to the file system."""


class ApplicationError(WalBatchError):
    """Application-level errors (configuration, plan files, batch outcome)."""


class PathResolutionError(DomainError):
    """Raised when a path cannot be made absolute at construction time."""

    def __init__(self, path: str | Path, original_error: Exception | None = None) -> None:
        super().__init__(
            ErrorCode.INVALID_PATH,
            f"Cannot resolve absolute path for: {path}",
            ErrorContext(file_path=str(path), operation="resolve_path"),
            original_error,
        )


class FileOperationError(InfrastructureError, OSError):
    """Raised when opening, streaming or deleting a data file fails."""


class WalWriteError(InfrastructureError, OSError):
    """Raised when a log record cannot be appended durably."""

    def __init__(self, wal_path: Path, original_error: Exception | None = None) -> None:
        self.wal_path = wal_path
        super().__init__(
            ErrorCode.WAL_WRITE_FAILED,
            f"Failed to append record to log {wal_path}: {original_error}",
            ErrorContext(file_path=str(wal_path), operation="wal_append"),
            original_error,
        )


class LogFileNotFoundError(InfrastructureError):
    """Raised when a requested log file cannot be found."""

    def __init__(self, log_path: Path) -> None:
        self.log_path = log_path
        super().__init__(
            ErrorCode.FILE_NOT_FOUND,
            f"Log file not found: {log_path}",
            ErrorContext(file_path=str(log_path), operation="read_records"),
        )


class LogFileCorruptedError(InfrastructureError):
    """Raised when a log file exists but a record cannot be parsed."""

    def __init__(self, log_path: Path, line_number: int, reason: str) -> None:
        self.log_path = log_path
        self.line_number = line_number
        self.reason = reason
        super().__init__(
            ErrorCode.WAL_CORRUPTED,
            f"Log file corrupted: {log_path} line {line_number} - {reason}",
            ErrorContext(
                file_path=str(log_path),
                operation="read_records",
                additional_data={"line_number": line_number},
            ),
        )


class BatchExecutionError(ApplicationError):
    """Raised when a batch step fails and the applied prefix was rolled back.

    The failure of the step itself is kept as ``original_error`` (and
    chained as ``__cause__`` by the executor). Undo failures never
    replace it; they are listed in ``undo_errors``.

    Attributes:
        failed_index: Index of the step whose apply failed
        undone_indices: Indices successfully undone, most recent first
        undo_errors: (index, error) for every undo that failed
        log_warnings: Messages for "undone" records that could not be written
    """

    def __init__(
        self,
        original_error: Exception,
        failed_index: int,
        undone_indices: list[int],
        undo_errors: list[tuple[int, Exception]],
        log_warnings: list[str],
    ) -> None:
        self.failed_index = failed_index
        self.undone_indices = undone_indices
        self.undo_errors = undo_errors
        self.log_warnings = log_warnings

        attempted = len(undone_indices) + len(undo_errors)
        message = (
            f"batch failed at step {failed_index}: {original_error} "
            f"after undoing {attempted} previously-applied steps"
        )
        if undo_errors:
            message += f" with {len(undo_errors)} undo failures"

        super().__init__(
            ErrorCode.BATCH_ROLLED_BACK,
            message,
            ErrorContext(
                operation="execute_all",
                additional_data={
                    "failed_index": failed_index,
                    "undone_count": len(undone_indices),
                    "undo_failure_count": len(undo_errors),
                    "log_warning_count": len(log_warnings),
                },
            ),
            original_error,
        )

    @property
    def rollback_complete(self) -> bool:
        """Whether every applied step was undone without error."""
        return not self.undo_errors

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["failed_index"] = self.failed_index
        data["undone_indices"] = list(self.undone_indices)
        data["undo_errors"] = [
            {"index": index, "error": str(error)} for index, error in self.undo_errors
        ]
        data["log_warnings"] = list(self.log_warnings)
        return data


# Convenience functions for common error scenarios
def create_file_operation_error(
    code: ErrorCode,
    message: str,
    file_path: str | Path,
    operation: str,
    original_error: Exception | None = None,
) -> FileOperationError:
    """Create a file operation error with context."""
    context = ErrorContext(
        file_path=str(file_path),
        operation=operation,
    )
    return FileOperationError(code, message, context, original_error)


def create_config_error(
    message: str,
    config_key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"config_key": config_key} if config_key else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return ApplicationError(
        ErrorCode.CONFIG_INVALID,
        message,
        context,
        original_error,
    )


def create_plan_error(
    message: str,
    plan_path: str | Path,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a plan-file error with context."""
    context = ErrorContext(file_path=str(plan_path), operation="load_plan")
    return ApplicationError(ErrorCode.PLAN_INVALID, message, context, original_error)
