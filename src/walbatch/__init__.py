"""
walbatch - all-or-nothing file moves and copies

Runs an ordered batch of file moves and copies, recording every step in
an append-only, fsynced log, and undoes the applied steps in reverse
order when one of them fails.
"""

__version__ = "0.1.0"

from .core import (
    Batch,
    BatchExecutor,
    BatchResult,
    CopyOperation,
    MoveOperation,
    Operation,
    WalLogWriter,
)
from .shared.errors import (
    BatchExecutionError,
    FileOperationError,
    PathResolutionError,
    WalBatchError,
    WalWriteError,
)

__all__ = [
    "Batch",
    "BatchExecutionError",
    "BatchExecutor",
    "BatchResult",
    "CopyOperation",
    "FileOperationError",
    "MoveOperation",
    "Operation",
    "PathResolutionError",
    "WalBatchError",
    "WalLogWriter",
    "WalWriteError",
]
