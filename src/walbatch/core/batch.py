"""Batch execution with reverse-order rollback.

This module provides the Batch and BatchExecutor classes. A batch is an
ordered list of operations plus the path of its log. The executor
writes the manifest, applies operations one at a time while recording a
status update after each success, and on the first failure undoes every
previously applied operation, most recent first.

State machine:
    IDLE -> LOGGING_MANIFEST -> APPLYING(i) -> SUCCEEDED
                                           \\-> UNDOING(j) -> FAILED
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import NoReturn

from walbatch.core.log_manager import WalLogWriter
from walbatch.core.models import StatusAction
from walbatch.core.operations import Operation, resolve_path
from walbatch.shared.errors import (
    BatchExecutionError,
    DomainError,
    ErrorCode,
    ErrorContext,
    WalWriteError,
)

logger = logging.getLogger(__name__)


class BatchState(str, Enum):
    """States of a batch execution."""

    IDLE = "idle"
    LOGGING_MANIFEST = "logging_manifest"
    APPLYING = "applying"
    UNDOING = "undoing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class BatchResult:
    """Result of a successful batch execution.

    Attributes:
        wal_path: Log the batch was recorded in
        executed: Number of operations applied
    """

    wal_path: Path
    executed: int


class Batch:
    """An ordered sequence of operations and the log they are recorded in."""

    def __init__(
        self,
        wal_path: str | os.PathLike[str],
        operations: Iterable[Operation] = (),
    ) -> None:
        self.wal_path = resolve_path(wal_path)
        self.operations: tuple[Operation, ...] = tuple(operations)

    def __len__(self) -> int:
        return len(self.operations)

    def __repr__(self) -> str:
        return f"Batch(wal_path={str(self.wal_path)!r}, operations={len(self.operations)})"

    def execute_all(
        self,
        *,
        durable_log: bool = True,
        rollback_on_log_failure: bool = False,
    ) -> BatchResult:
        """Run the batch to completion, recording it in ``wal_path``.

        Raises:
            WalWriteError: If a log write aborts the batch
            BatchExecutionError: If an operation failed and the batch was rolled back
        """
        executor = BatchExecutor(
            WalLogWriter(self.wal_path, durable=durable_log),
            rollback_on_log_failure=rollback_on_log_failure,
        )
        return executor.execute(self)


class BatchExecutor:
    """Drives a batch through the log writer and its operations.

    Attributes:
        log_writer: Sink for manifest and status records
        rollback_on_log_failure: If True, a failed "executed" record is
            treated like a failed step and triggers rollback; otherwise it
            aborts the batch with no rollback
        state: Current state of the last or running execution
    """

    def __init__(
        self,
        log_writer: WalLogWriter,
        *,
        rollback_on_log_failure: bool = False,
    ) -> None:
        self.log_writer = log_writer
        self.rollback_on_log_failure = rollback_on_log_failure
        self.state = BatchState.IDLE

    def execute(self, batch: Batch) -> BatchResult:
        """Execute every operation of ``batch`` or none of them.

        Args:
            batch: Batch to run

        Returns:
            BatchResult when every step succeeded

        Raises:
            DomainError: If ``batch.wal_path`` is not the writer's log;
                nothing is written or applied
            WalWriteError: If the manifest, an "executed" record (unless
                rollback_on_log_failure is set) or the terminal record
                cannot be written
            BatchExecutionError: If an operation failed; every applied
                step has been undone (or its undo failure recorded)
        """
        if batch.wal_path != self.log_writer.wal_path:
            raise DomainError(
                ErrorCode.INVALID_PATH,
                f"Batch log {batch.wal_path} does not match writer log {self.log_writer.wal_path}",
                ErrorContext(file_path=str(batch.wal_path), operation="execute_batch"),
            )

        operations = batch.operations

        self.state = BatchState.LOGGING_MANIFEST
        try:
            self.log_writer.write_manifest(operations)
        except WalWriteError:
            self.state = BatchState.FAILED
            logger.error("Could not write batch manifest to %s; nothing applied", self.log_writer.wal_path)
            raise
        logger.info("Batch started: %d operations, log %s", len(operations), self.log_writer.wal_path)

        for index, operation in enumerate(operations):
            self.state = BatchState.APPLYING
            try:
                operation.apply()
            except Exception as e:  # noqa: BLE001
                logger.warning("Step %d (%s) failed, undoing %d applied steps: %s", index, operation, index, e)
                self._rollback(operations, index, index - 1, e)

            logger.info("Step %d executed: %s", index, operation)

            try:
                self.log_writer.write_status(StatusAction.EXECUTED, index, operation)
            except WalWriteError as e:
                if not self.rollback_on_log_failure:
                    self.state = BatchState.FAILED
                    logger.error("Could not record step %d; aborting batch without rollback", index)
                    raise
                logger.warning("Could not record step %d, rolling back including it: %s", index, e)
                self._rollback(operations, index, index, e)

        self.state = BatchState.SUCCEEDED
        try:
            self.log_writer.write_status(StatusAction.BATCH_DONE, 0)
        except WalWriteError:
            self.state = BatchState.FAILED
            raise
        logger.info("Batch is done: %d operations executed", len(operations))

        return BatchResult(wal_path=self.log_writer.wal_path, executed=len(operations))

    def _rollback(
        self,
        operations: tuple[Operation, ...],
        failed_index: int,
        last_applied: int,
        cause: Exception,
    ) -> NoReturn:
        """Undo steps ``last_applied`` down to 0, then raise BatchExecutionError.

        Every remaining step is attempted even when an undo or its log
        record fails.
        """
        self.state = BatchState.UNDOING
        undone: list[int] = []
        undo_errors: list[tuple[int, Exception]] = []
        log_warnings: list[str] = []

        for index in range(last_applied, -1, -1):
            operation = operations[index]
            try:
                operation.undo()
            except Exception as e:  # noqa: BLE001
                logger.error("Undo of step %d (%s) failed: %s", index, operation, e)
                undo_errors.append((index, e))
                continue

            undone.append(index)
            logger.info("Step %d undone: %s", index, operation)

            try:
                self.log_writer.write_status(StatusAction.UNDONE, index, operation)
            except WalWriteError as e:
                logger.warning("Could not record undo of step %d: %s", index, e)
                log_warnings.append(f"step {index}: {e}")

        self.state = BatchState.FAILED
        raise BatchExecutionError(
            original_error=cause,
            failed_index=failed_index,
            undone_indices=undone,
            undo_errors=undo_errors,
            log_warnings=log_warnings,
        ) from cause
