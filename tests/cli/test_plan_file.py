"""Tests for plan file loading."""

from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from walbatch.cli.plan import BatchPlan, PlannedOperation, load_plan
from walbatch.config.settings import ExecutionSettings
from walbatch.core.models import OperationType
from walbatch.core.operations import CopyOperation, MoveOperation
from walbatch.shared.errors import ApplicationError, ErrorCode


class TestLoadPlan:
    """Test cases for load_plan."""

    def test_json_plan(self, tmp_path: Path) -> None:
        plan_path = tmp_path / "plan.json"
        plan_path.write_bytes(
            orjson.dumps(
                {
                    "wal_path": str(tmp_path / "wal.jsonl"),
                    "operations": [
                        {"type": "move", "source": "a", "target": "b"},
                        {"type": "copy", "source": "c", "target": "d"},
                    ],
                }
            )
        )

        plan = load_plan(plan_path)

        assert plan.wal_path == tmp_path / "wal.jsonl"
        assert [op.type for op in plan.operations] == [OperationType.MOVE, OperationType.COPY]

    def test_toml_plan(self, tmp_path: Path) -> None:
        plan_path = tmp_path / "plan.toml"
        plan_path.write_text(
            '[[operations]]\ntype = "copy"\nsource = "c"\ntarget = "d"\n',
            encoding="utf-8",
        )

        plan = load_plan(plan_path)

        assert plan.wal_path is None
        assert plan.operations == [PlannedOperation(type=OperationType.COPY, source=Path("c"), target=Path("d"))]

    @pytest.mark.parametrize(
        "content",
        [
            b"{not json",
            b'{"operations": [{"type": "delete", "source": "a", "target": "b"}]}',
            b'{"operations": [{"type": "move", "source": "a"}]}',
            b'{"operations": [], "unexpected": 1}',
        ],
    )
    def test_invalid_plan(self, tmp_path: Path, content: bytes) -> None:
        plan_path = tmp_path / "plan.json"
        plan_path.write_bytes(content)

        with pytest.raises(ApplicationError) as exc_info:
            load_plan(plan_path)

        assert exc_info.value.code == ErrorCode.PLAN_INVALID

    def test_missing_plan(self, tmp_path: Path) -> None:
        with pytest.raises(ApplicationError):
            load_plan(tmp_path / "missing.json")


class TestBuildBatch:
    """Test cases for BatchPlan.build_batch."""

    def test_builds_operations_in_order(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        plan = BatchPlan(
            operations=[
                PlannedOperation(type=OperationType.MOVE, source=Path("a"), target=Path("b")),
                PlannedOperation(type=OperationType.COPY, source=Path("c"), target=Path("d")),
            ]
        )

        batch = plan.build_batch(execution=ExecutionSettings(chunk_size=10, durable_data=False))

        assert [type(op) for op in batch.operations] == [MoveOperation, CopyOperation]
        assert batch.operations[0].source_path == tmp_path / "a"
        assert batch.operations[1].chunk_size == 10
        assert batch.operations[1].durable is False
        assert batch.wal_path == tmp_path / "wal.jsonl"

    def test_wal_override_wins(self, tmp_path: Path) -> None:
        plan = BatchPlan(wal_path=tmp_path / "plan.wal")

        assert plan.build_batch(tmp_path / "cli.wal").wal_path == tmp_path / "cli.wal"
        assert plan.build_batch().wal_path == tmp_path / "plan.wal"
