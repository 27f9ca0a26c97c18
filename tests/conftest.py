"""
Pytest configuration and shared fixtures for walbatch tests.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import orjson
import pytest


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Create a file under tmp_path with the given content.

    Returns:
        Factory taking a relative name and bytes content.
    """

    def _make(name: str, content: bytes = b"payload") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return _make


@pytest.fixture
def wal_path(tmp_path: Path) -> Path:
    """Log destination inside tmp_path."""
    return tmp_path / "wal.jsonl"


@pytest.fixture
def read_wal() -> Callable[[Path], list[dict[str, Any]]]:
    """Read a log file as raw JSON objects, one per line."""

    def _read(path: Path) -> list[dict[str, Any]]:
        return [orjson.loads(line) for line in path.read_bytes().splitlines() if line.strip()]

    return _read


@pytest.fixture(autouse=True)
def _clear_walbatch_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep WALBATCH_* variables from the host out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("WALBATCH_"):
            monkeypatch.delenv(key, raising=False)
