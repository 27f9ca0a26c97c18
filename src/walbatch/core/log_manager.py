"""
Write-ahead log management for walbatch.

This module appends batch manifests and status updates to a log file,
one JSON object per line. Every append is a complete
open/write/flush/fsync/close cycle, so a record is on disk before the
next file system mutation is attempted.

The log is an audit trail. ``read_records`` exists to inspect it; the
executor never reads it back.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from walbatch.core.models import (
    BatchStartRecord,
    StatusAction,
    StatusUpdateRecord,
    wal_record_adapter,
)
from walbatch.core.operations import resolve_path
from walbatch.shared.constants import FileSystem
from walbatch.shared.errors import (
    ErrorCode,
    LogFileCorruptedError,
    LogFileNotFoundError,
    WalWriteError,
    create_file_operation_error,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from walbatch.core.operations import Operation

logger = logging.getLogger(__name__)


class WalLogWriter:
    """
    Append-only, durably flushed record sink.

    No file handle is held between calls. A single writer per log path
    is assumed; concurrent writers to the same path must be prevented by
    the caller.
    """

    def __init__(self, wal_path: str | os.PathLike[str], *, durable: bool = True) -> None:
        """
        Initialize the WalLogWriter.

        Args:
            wal_path: Log destination; made absolute here.
            durable: Whether each append is fsynced before returning.
        """
        self.wal_path = resolve_path(wal_path)
        self.durable = durable

    def append(self, record: BatchStartRecord | StatusUpdateRecord) -> None:
        """
        Append one record to the log.

        Args:
            record: Manifest or status update to write.

        Raises:
            WalWriteError: If the log cannot be opened, written or flushed.
        """
        line = orjson.dumps(record.model_dump(mode="json")) + b"\n"
        try:
            with self.wal_path.open("ab") as f:
                f.write(line)
                f.flush()
                if self.durable:
                    os.fsync(f.fileno())
        except OSError as e:
            raise WalWriteError(self.wal_path, original_error=e) from e

    def write_manifest(self, operations: Sequence[Operation]) -> BatchStartRecord:
        """Write the batch manifest listing every operation in order."""
        record = BatchStartRecord(
            wal_path=self.wal_path,
            commands=[operation.snapshot() for operation in operations],
        )
        self.append(record)
        logger.debug("Batch manifest written to %s (%d operations)", self.wal_path, len(operations))
        return record

    def write_status(
        self,
        action: StatusAction,
        index: int,
        operation: Operation | None = None,
    ) -> StatusUpdateRecord:
        """Write a status update for step ``index``."""
        record = StatusUpdateRecord(
            action=action,
            index=index,
            cmd=operation.snapshot() if operation is not None else None,
        )
        self.append(record)
        logger.debug("Wrote status %r for step %d", action.value, index)
        return record


def read_records(wal_path: str | os.PathLike[str]) -> list[BatchStartRecord | StatusUpdateRecord]:
    """
    Read every record of a log, front to back.

    Args:
        wal_path: Log file to read.

    Returns:
        Records in the order they were appended.

    Raises:
        LogFileNotFoundError: If the log file does not exist.
        LogFileCorruptedError: If a line cannot be parsed.
        FileOperationError: If the log exists but cannot be read.
    """
    path = Path(wal_path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError as e:
        raise LogFileNotFoundError(path) from e
    except OSError as e:
        raise create_file_operation_error(
            ErrorCode.FILE_READ_ERROR,
            f"Cannot read log file {path}: {e}",
            path,
            "read_log",
            e,
        ) from e

    records: list[BatchStartRecord | StatusUpdateRecord] = []
    for line_number, line in enumerate(raw.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            records.append(wal_record_adapter.validate_python(orjson.loads(line)))
        except orjson.JSONDecodeError as e:
            raise LogFileCorruptedError(path, line_number, str(e)) from e
        except ValidationError as e:
            raise LogFileCorruptedError(path, line_number, str(e)) from e

    return records


def default_wal_path(directory: str | os.PathLike[str] | None = None) -> Path:
    """Return the default log location inside ``directory`` (cwd if omitted)."""
    base = Path(directory) if directory is not None else Path.cwd()
    return resolve_path(base / FileSystem.DEFAULT_WAL_NAME)
