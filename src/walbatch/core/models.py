"""
Data models for walbatch log records.

This module defines the records appended to a batch log: the manifest
written before any file is touched, and one status update per step
outcome. Records are pydantic models so that writing and reading the
log go through the same validation.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from walbatch.shared.constants import WalRecordTypes


class OperationType(str, Enum):
    """Enumeration of supported file operations."""

    MOVE = "move"
    COPY = "copy"


class StatusAction(str, Enum):
    """Outcome recorded by a status update."""

    EXECUTED = "executed"
    UNDONE = "undone"
    BATCH_DONE = "batch is done"


class CommandSnapshot(BaseModel):
    """Fields of an operation at the moment a record is written."""

    model_config = ConfigDict(frozen=True)

    name: OperationType = Field(
        ...,
        description="Kind of operation (move or copy)",
    )
    source_path: Path = Field(
        ...,
        description="Absolute source path",
    )
    target_path: Path = Field(
        ...,
        description="Absolute target path",
    )

    def __str__(self) -> str:
        return f"{self.name.value}: {self.source_path} -> {self.target_path}"


class BatchStartRecord(BaseModel):
    """Manifest of a batch: the full ordered operation list."""

    model_config = ConfigDict(frozen=True)

    type: Literal["batch_start"] = WalRecordTypes.BATCH_START
    wal_path: Path = Field(..., description="Absolute path of the log")
    commands: list[CommandSnapshot] = Field(default_factory=list)


class StatusUpdateRecord(BaseModel):
    """Outcome of one step, or the terminal completion marker."""

    model_config = ConfigDict(frozen=True)

    type: Literal["status_update"] = WalRecordTypes.STATUS_UPDATE
    action: StatusAction
    index: int = Field(..., ge=0, description="Zero-based index of the step")
    cmd: CommandSnapshot | None = None


WalRecord = Annotated[
    Union[BatchStartRecord, StatusUpdateRecord],
    Field(discriminator="type"),
]

wal_record_adapter: TypeAdapter[BatchStartRecord | StatusUpdateRecord] = TypeAdapter(WalRecord)
