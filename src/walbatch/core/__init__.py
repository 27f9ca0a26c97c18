"""Core batch engine: operations, log writer and executor."""

from .batch import Batch, BatchExecutor, BatchResult, BatchState
from .log_manager import WalLogWriter, read_records
from .models import (
    BatchStartRecord,
    CommandSnapshot,
    OperationType,
    StatusAction,
    StatusUpdateRecord,
)
from .operations import (
    CopyOperation,
    MoveOperation,
    Operation,
    create_operation,
    operation_from_snapshot,
    resolve_path,
)

__all__ = [
    "Batch",
    "BatchExecutor",
    "BatchResult",
    "BatchStartRecord",
    "BatchState",
    "CommandSnapshot",
    "CopyOperation",
    "MoveOperation",
    "Operation",
    "OperationType",
    "StatusAction",
    "StatusUpdateRecord",
    "WalLogWriter",
    "create_operation",
    "operation_from_snapshot",
    "read_records",
    "resolve_path",
]
