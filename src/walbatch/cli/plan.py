"""Plan files: the list of operations a `walbatch run` executes.

A plan is a JSON or TOML document::

    wal_path = "migrate.wal.jsonl"    # optional

    [[operations]]
    type = "move"
    source = "a.txt"
    target = "b.txt"

Relative paths in a plan are resolved against the current working
directory, like any other operation path.
"""

from __future__ import annotations

from pathlib import Path

import orjson
import toml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from walbatch.config.settings import ExecutionSettings
from walbatch.core.batch import Batch
from walbatch.core.log_manager import default_wal_path
from walbatch.core.models import OperationType
from walbatch.core.operations import create_operation
from walbatch.shared.errors import create_plan_error


class PlannedOperation(BaseModel):
    """One entry of a plan file."""

    model_config = ConfigDict(extra="forbid")

    type: OperationType
    source: Path
    target: Path


class BatchPlan(BaseModel):
    """A validated plan file."""

    model_config = ConfigDict(extra="forbid")

    wal_path: Path | None = None
    operations: list[PlannedOperation] = Field(default_factory=list)

    def build_batch(
        self,
        wal_path: Path | None = None,
        execution: ExecutionSettings | None = None,
    ) -> Batch:
        """Create the Batch described by this plan.

        Args:
            wal_path: Log destination overriding the plan's own wal_path
            execution: Execution settings (chunk size, data durability)
        """
        execution = execution or ExecutionSettings()
        destination = wal_path or self.wal_path or default_wal_path()
        operations = [
            create_operation(
                entry.type,
                entry.source,
                entry.target,
                chunk_size=execution.chunk_size,
                durable=execution.durable_data,
            )
            for entry in self.operations
        ]
        return Batch(destination, operations)


def load_plan(plan_path: Path) -> BatchPlan:
    """Read and validate a plan file.

    Raises:
        ApplicationError: If the file cannot be read, parsed or validated.
    """
    try:
        raw = plan_path.read_bytes()
    except OSError as e:
        raise create_plan_error(f"Cannot read plan file {plan_path}: {e}", plan_path, e) from e

    try:
        if plan_path.suffix.lower() == ".toml":
            data = toml.loads(raw.decode("utf-8"))
        else:
            data = orjson.loads(raw)
    except (toml.TomlDecodeError, orjson.JSONDecodeError, UnicodeDecodeError) as e:
        raise create_plan_error(f"Cannot parse plan file {plan_path}: {e}", plan_path, e) from e

    try:
        return BatchPlan.model_validate(data)
    except ValidationError as e:
        raise create_plan_error(f"Invalid plan file {plan_path}: {e}", plan_path, e) from e


__all__ = ["BatchPlan", "PlannedOperation", "load_plan"]
