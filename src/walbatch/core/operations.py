"""Reversible file operations.

This module provides the units of work a batch is made of. Each
operation knows how to apply itself and how to reverse a previously
applied instance of itself, and touches only its two declared paths.

Paths are made absolute when the operation is constructed, so a batch
keeps working on the same files even if the working directory changes
before it runs.
"""

from __future__ import annotations

import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar

from walbatch.core.models import CommandSnapshot, OperationType
from walbatch.shared.constants import FileSystem
from walbatch.shared.errors import (
    ErrorCode,
    FileOperationError,
    PathResolutionError,
    create_file_operation_error,
)

logger = logging.getLogger(__name__)


def resolve_path(path: str | os.PathLike[str]) -> Path:
    """Return ``path`` as an absolute path without following symlinks.

    Raises:
        PathResolutionError: If the working directory cannot be determined
    """
    try:
        return Path(os.path.abspath(os.fspath(path)))
    except (OSError, ValueError) as e:
        raise PathResolutionError(str(path), original_error=e) from e


def _stream_file(
    source_path: Path,
    target_path: Path,
    *,
    chunk_size: int,
    durable: bool,
    operation: str,
) -> None:
    """Copy the bytes of ``source_path`` into ``target_path``.

    The source is opened first; a missing source never creates the target.
    An existing target is overwritten.
    """
    try:
        source = source_path.open("rb")
    except OSError as e:
        raise create_file_operation_error(
            ErrorCode.FILE_READ_ERROR,
            f"Cannot open source for reading: {source_path} ({e})",
            source_path,
            operation,
            e,
        ) from e

    with source:
        if target_path.exists() and os.path.samefile(source_path, target_path):
            raise create_file_operation_error(
                ErrorCode.INVALID_PATH,
                f"Source and target are the same file: {source_path}",
                target_path,
                operation,
            )
        try:
            target = target_path.open("wb")
        except OSError as e:
            raise create_file_operation_error(
                ErrorCode.FILE_WRITE_ERROR,
                f"Cannot open target for writing: {target_path} ({e})",
                target_path,
                operation,
                e,
            ) from e

        with target:
            try:
                shutil.copyfileobj(source, target, chunk_size)
                if durable:
                    target.flush()
                    os.fsync(target.fileno())
            except OSError as e:
                raise create_file_operation_error(
                    ErrorCode.FILE_WRITE_ERROR,
                    f"IO error while copying {source_path} -> {target_path}: {e}",
                    target_path,
                    operation,
                    e,
                ) from e


def _remove_file(path: Path, operation: str, *, missing_ok: bool = False) -> None:
    try:
        path.unlink(missing_ok=missing_ok)
    except OSError as e:
        raise create_file_operation_error(
            ErrorCode.FILE_DELETE_ERROR,
            f"Cannot delete file: {path} ({e})",
            path,
            operation,
            e,
        ) from e


class Operation(ABC):
    """A single reversible file mutation.

    Subclasses set ``name`` to their OperationType tag and implement
    ``apply`` and ``undo``. Instances are immutable once constructed.

    Attributes:
        source_path: Absolute source path
        target_path: Absolute target path
        chunk_size: Buffer size used when streaming bytes
        durable: Whether data written to a target is fsynced
    """

    name: ClassVar[OperationType]

    def __init__(
        self,
        source_path: str | os.PathLike[str],
        target_path: str | os.PathLike[str],
        *,
        chunk_size: int = FileSystem.CHUNK_SIZE,
        durable: bool = True,
    ) -> None:
        """Initialize the operation.

        Args:
            source_path: Source path, possibly relative
            target_path: Target path, possibly relative
            chunk_size: Buffer size used when streaming bytes
            durable: Whether data written to a target is fsynced

        Raises:
            PathResolutionError: If either path cannot be made absolute
        """
        self._source_path = resolve_path(source_path)
        self._target_path = resolve_path(target_path)
        self.chunk_size = chunk_size
        self.durable = durable

    @property
    def source_path(self) -> Path:
        return self._source_path

    @property
    def target_path(self) -> Path:
        return self._target_path

    @abstractmethod
    def apply(self) -> None:
        """Perform the operation.

        Raises:
            FileOperationError: If any open, copy or delete fails
        """

    @abstractmethod
    def undo(self) -> None:
        """Reverse a previously applied instance of this operation.

        Raises:
            FileOperationError: If the reversal fails
        """

    def snapshot(self) -> CommandSnapshot:
        """Return the fields of this operation as a log record payload."""
        return CommandSnapshot(
            name=self.name,
            source_path=self._source_path,
            target_path=self._target_path,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Operation):
            return NotImplemented
        return (
            self.name == other.name
            and self._source_path == other._source_path
            and self._target_path == other._target_path
        )

    def __hash__(self) -> int:
        return hash((self.name, self._source_path, self._target_path))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._source_path)!r}, {str(self._target_path)!r})"

    def __str__(self) -> str:
        return f"{self.name.value}: {self._source_path} -> {self._target_path}"


class MoveOperation(Operation):
    """Move a file by copying its bytes to the target and deleting the source.

    A failure after the copy but before the deletion leaves both files in
    place; callers must treat a failed move as possibly having completed
    its copy half.
    """

    name = OperationType.MOVE

    def apply(self) -> None:
        _stream_file(
            self._source_path,
            self._target_path,
            chunk_size=self.chunk_size,
            durable=self.durable,
            operation="move",
        )
        _remove_file(self._source_path, "move")
        logger.debug("Moved: %s -> %s", self._source_path, self._target_path)

    def undo(self) -> None:
        source_exists = self._source_path.exists()
        target_exists = self._target_path.exists()

        if source_exists and target_exists:
            # Copy half done, source not yet deleted
            _remove_file(self._target_path, "undo_move")
            logger.debug("Undo move: removed partial target %s", self._target_path)
        elif target_exists:
            try:
                _stream_file(
                    self._target_path,
                    self._source_path,
                    chunk_size=self.chunk_size,
                    durable=self.durable,
                    operation="undo_move",
                )
            except FileOperationError:
                # Never leave a partial source beside the intact target
                _remove_file(self._source_path, "undo_move", missing_ok=True)
                raise
            _remove_file(self._target_path, "undo_move")
            logger.debug("Undo move: restored %s from %s", self._source_path, self._target_path)
        else:
            # Never applied, or already undone
            logger.debug("Undo move: nothing to do for %s", self)


class CopyOperation(Operation):
    """Copy a file's bytes to the target, leaving the source untouched."""

    name = OperationType.COPY

    def apply(self) -> None:
        _stream_file(
            self._source_path,
            self._target_path,
            chunk_size=self.chunk_size,
            durable=self.durable,
            operation="copy",
        )
        logger.debug("Copied: %s -> %s", self._source_path, self._target_path)

    def undo(self) -> None:
        _remove_file(self._target_path, "undo_copy", missing_ok=True)
        logger.debug("Undo copy: removed %s", self._target_path)


def create_operation(
    operation_type: OperationType,
    source_path: str | os.PathLike[str],
    target_path: str | os.PathLike[str],
    *,
    chunk_size: int = FileSystem.CHUNK_SIZE,
    durable: bool = True,
) -> Operation:
    """Build the operation variant for ``operation_type``."""
    if operation_type is OperationType.MOVE:
        return MoveOperation(source_path, target_path, chunk_size=chunk_size, durable=durable)
    if operation_type is OperationType.COPY:
        return CopyOperation(source_path, target_path, chunk_size=chunk_size, durable=durable)

    # Exhaustive enum handling - this should never be reached
    msg = f"Unknown operation type: {operation_type}"  # type: ignore[unreachable]
    raise AssertionError(msg)


def operation_from_snapshot(snapshot: CommandSnapshot) -> Operation:
    """Rebuild an operation from a record payload."""
    return create_operation(snapshot.name, snapshot.source_path, snapshot.target_path)
