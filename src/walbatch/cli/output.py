"""Machine-readable output of walbatch commands (``--json``)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import orjson
from pydantic import BaseModel, Field, model_validator

from walbatch.shared.errors import WalBatchError


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CommandOutput(BaseModel):
    """Envelope printed by ``run`` and ``show`` in JSON mode.

    Attributes:
        success: Whether the command did what was asked; always False
            when ``errors`` is not empty
        command: Name of the command that produced the output
        timestamp: Time the output was created (UTC)
        data: Command result, None on failure
        errors: ``WalBatchError.to_dict()`` of each reported error
        warnings: Non-fatal problems, such as unrecorded undo steps
    """

    success: bool
    command: str
    timestamp: datetime = Field(default_factory=_utc_now)
    data: dict[str, Any] | None = None
    errors: list[dict[str, Any]] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _errors_mean_failure(self) -> CommandOutput:
        if self.errors:
            self.success = False
        return self

    @classmethod
    def failure(
        cls,
        command: str,
        error: WalBatchError,
        warnings: list[str] | None = None,
    ) -> CommandOutput:
        """Build the output for a command that stopped on ``error``."""
        return cls(success=False, command=command, errors=[error.to_dict()], warnings=warnings or [])

    def to_json(self) -> bytes:
        """Serialize with sorted keys and two-space indentation."""
        return orjson.dumps(
            self.model_dump(mode="json"),
            option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2,
        )
