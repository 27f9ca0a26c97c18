"""Tests for the walbatch error hierarchy."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import pytest

from walbatch.shared.errors import (
    ApplicationError,
    BatchExecutionError,
    DomainError,
    ErrorCode,
    ErrorContext,
    FileOperationError,
    InfrastructureError,
    PathResolutionError,
    WalBatchError,
    WalWriteError,
    create_config_error,
    create_file_operation_error,
    create_plan_error,
)


class _Color(Enum):
    RED = "red"


class TestErrorContext:
    """Test cases for ErrorContext."""

    def test_coerces_path_and_enum(self) -> None:
        context = ErrorContext(additional_data={"path": Path("/a"), "color": _Color.RED, "n": 3})

        assert context.additional_data == {"path": "/a", "color": "red", "n": 3}

    def test_rejects_non_primitive(self) -> None:
        with pytest.raises(TypeError):
            ErrorContext(additional_data={"bad": object()})

    def test_rejects_non_dict(self) -> None:
        with pytest.raises(TypeError):
            ErrorContext(additional_data=[1, 2])  # type: ignore[arg-type]

    def test_safe_dict_always_has_additional_data(self) -> None:
        assert ErrorContext(file_path="/x").safe_dict() == {"file_path": "/x", "additional_data": {}}


class TestHierarchy:
    """Test cases for error classes."""

    def test_str_and_to_dict(self) -> None:
        original = ValueError("bad")
        error = WalBatchError(ErrorCode.CONFIG_INVALID, "oops", ErrorContext(operation="op"), original)

        assert str(error) == "CONFIG_INVALID: oops"
        assert error.to_dict() == {
            "code": "CONFIG_INVALID",
            "message": "oops",
            "context": {"operation": "op", "additional_data": {}},
            "original_error": "bad",
        }

    @pytest.mark.parametrize(
        ("error", "bases"),
        [
            (PathResolutionError("x"), (DomainError,)),
            (FileOperationError(ErrorCode.FILE_READ_ERROR, "m"), (InfrastructureError, OSError)),
            (WalWriteError(Path("/w"), OSError("disk")), (InfrastructureError, OSError)),
            (create_plan_error("m", "/p"), (ApplicationError,)),
        ],
    )
    def test_bases(self, error: WalBatchError, bases: tuple[type, ...]) -> None:
        for base in bases:
            assert isinstance(error, base)
        assert isinstance(error, WalBatchError)

    def test_io_errors_catchable_as_oserror(self) -> None:
        with pytest.raises(OSError):
            raise WalWriteError(Path("/w"), OSError("disk full"))

    def test_wal_write_error_message(self) -> None:
        error = WalWriteError(Path("/logs/wal.jsonl"), OSError("disk full"))

        assert error.wal_path == Path("/logs/wal.jsonl")
        assert "disk full" in str(error)
        assert error.context.file_path == "/logs/wal.jsonl"

    def test_file_operation_error_factory(self) -> None:
        original = PermissionError(13, "Permission denied")

        error = create_file_operation_error(
            ErrorCode.FILE_DELETE_ERROR, "cannot delete", Path("/a"), "move", original
        )

        assert error.code == ErrorCode.FILE_DELETE_ERROR
        assert error.context.operation == "move"
        assert error.original_error is original


class TestBatchExecutionError:
    """Test cases for the rollback summary error."""

    def test_message_counts_attempted_undos(self) -> None:
        error = BatchExecutionError(
            original_error=OSError("step failed"),
            failed_index=3,
            undone_indices=[2, 0],
            undo_errors=[(1, OSError("undo failed"))],
            log_warnings=[],
        )

        assert str(error) == (
            "BATCH_ROLLED_BACK: batch failed at step 3: step failed "
            "after undoing 3 previously-applied steps with 1 undo failures"
        )
        assert not error.rollback_complete

    def test_to_dict_lists_details(self) -> None:
        error = BatchExecutionError(
            original_error=OSError("step failed"),
            failed_index=1,
            undone_indices=[0],
            undo_errors=[],
            log_warnings=["step 0: disk full"],
        )

        data = error.to_dict()

        assert data["failed_index"] == 1
        assert data["undone_indices"] == [0]
        assert data["undo_errors"] == []
        assert data["log_warnings"] == ["step 0: disk full"]
        assert data["original_error"] == "step failed"
        assert data["context"]["additional_data"]["undone_count"] == 1


def test_create_config_error_records_key() -> None:
    error = create_config_error("bad", config_key="execution.chunk_size")

    assert error.code == ErrorCode.CONFIG_INVALID
    assert error.context.additional_data == {"config_key": "execution.chunk_size"}
