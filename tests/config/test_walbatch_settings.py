"""Tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from walbatch.config.settings import Settings, load_settings
from walbatch.shared.constants import FileSystem, Logging
from walbatch.shared.errors import ApplicationError, ErrorCode


class TestLoadSettings:
    """Test cases for load_settings."""

    def test_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a config file or env vars, defaults apply."""
        monkeypatch.chdir(tmp_path)

        settings = load_settings()

        assert settings.logging.level == Logging.DEFAULT_LEVEL_NAME
        assert settings.logging.file is None
        assert settings.execution.chunk_size == FileSystem.CHUNK_SIZE
        assert settings.execution.durable_data is True
        assert settings.execution.rollback_on_log_failure is False

    def test_toml_file(self, tmp_path: Path) -> None:
        config = tmp_path / "custom.toml"
        config.write_text(
            '[logging]\nlevel = "debug"\nfile = "logs/walbatch.log"\n\n'
            "[execution]\nchunk_size = 4096\nrollback_on_log_failure = true\n",
            encoding="utf-8",
        )

        settings = load_settings(config)

        assert settings.logging.level == "DEBUG"
        assert settings.logging.file == "logs/walbatch.log"
        assert settings.execution.chunk_size == 4096
        assert settings.execution.rollback_on_log_failure is True

    def test_default_file_in_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "walbatch.toml").write_text("[execution]\ndurable_log = false\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        assert load_settings().execution.durable_log is False

    def test_environment_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WALBATCH_EXECUTION__CHUNK_SIZE", "1234")
        monkeypatch.setenv("WALBATCH_LOGGING__LEVEL", "warning")

        settings = load_settings()

        assert settings.execution.chunk_size == 1234
        assert settings.logging.level == "WARNING"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ApplicationError) as exc_info:
            load_settings(tmp_path / "nope.toml")

        assert exc_info.value.code == ErrorCode.CONFIG_INVALID

    def test_malformed_toml(self, tmp_path: Path) -> None:
        config = tmp_path / "bad.toml"
        config.write_text("[execution\nchunk_size = ", encoding="utf-8")

        with pytest.raises(ApplicationError, match="Cannot read configuration file"):
            load_settings(config)

    def test_invalid_values(self, tmp_path: Path) -> None:
        config = tmp_path / "bad.toml"
        config.write_text("[execution]\nchunk_size = 0\n", encoding="utf-8")

        with pytest.raises(ApplicationError) as exc_info:
            load_settings(config)

        assert exc_info.value.context.additional_data == {"config_key": "execution.chunk_size"}

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValueError):
            Settings(logging={"level": "LOUD"})
