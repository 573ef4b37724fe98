"""Tests for loading the settings registry from TOML and the environment."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from tablekit.config import (
    Settings,
    configure_logging,
    get_config,
    load_settings,
    reload_config,
)
from tablekit.shared.errors import ApplicationError, ErrorCode
from tablekit.shared.logging import StructuredFormatter


@pytest.fixture
def temp_config(tmp_path: Path) -> Path:
    """Create temporary config file."""
    config_file = tmp_path / "tablekit.toml"
    config_content = """
[reset]
limit = 50
timeout = 0.5
scope = { status = "published" }

[logging]
level = "DEBUG"
rich_console = false
"""
    config_file.write_text(config_content)
    return config_file


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory so no default config or .env is found."""
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


class TestLoadSettings:
    """load_settings sources."""

    def test_defaults_without_sources(self, isolated_cwd):
        """Without a file or variables every reset value is unset."""
        settings = load_settings()

        assert settings.reset.limit is None
        assert settings.reset.model_dump(exclude_none=True) == {}
        assert settings.logging.level == "INFO"

    def test_explicit_file(self, isolated_cwd, temp_config):
        """An explicit TOML file is read."""
        settings = load_settings(temp_config)

        assert settings.reset.limit == 50
        assert settings.reset.timeout == 0.5
        assert settings.reset.scope == {"status": "published"}
        assert settings.logging.level == "DEBUG"

    def test_file_from_environment(self, isolated_cwd, temp_config, monkeypatch):
        """TABLEKIT_CONFIG_FILE names the file when no path is given."""
        monkeypatch.setenv("TABLEKIT_CONFIG_FILE", str(temp_config))

        assert load_settings().reset.limit == 50

    def test_default_location(self, isolated_cwd, temp_config):
        """tablekit.toml in the working directory is picked up."""
        (isolated_cwd / "tablekit.toml").write_text(temp_config.read_text())

        assert load_settings().reset.limit == 50

    def test_missing_explicit_file(self, isolated_cwd, tmp_path):
        """A named file that does not exist is an error, not a silent default."""
        with pytest.raises(ApplicationError) as exc_info:
            load_settings(tmp_path / "missing.toml")

        assert exc_info.value.code == ErrorCode.CONFIG_MISSING
        assert isinstance(exc_info.value.original_error, FileNotFoundError)

    def test_environment_variables(self, isolated_cwd, monkeypatch):
        """Nested variables fill the reset section."""
        monkeypatch.setenv("TABLEKIT_RESET__LIMIT", "25")
        monkeypatch.setenv("TABLEKIT_RESET__VALIDATION", "false")

        settings = load_settings()

        assert settings.reset.limit == 25
        assert settings.reset.validation is False

    def test_dotenv_file(self, isolated_cwd):
        """Variables from a .env file in the working directory are used."""
        (isolated_cwd / ".env").write_text("TABLEKIT_RESET__TIMEOUT=3\n")

        try:
            assert load_settings().reset.timeout == 3.0
        finally:
            os.environ.pop("TABLEKIT_RESET__TIMEOUT", None)

    def test_invalid_value(self, isolated_cwd, monkeypatch):
        """Invalid values surface as configuration errors."""
        monkeypatch.setenv("TABLEKIT_RESET__LIMIT", "0")

        with pytest.raises(ApplicationError) as exc_info:
            load_settings()

        assert exc_info.value.code == ErrorCode.CONFIG_ERROR
        assert exc_info.value.context.additional_data == {"config_key": "reset.limit"}

    def test_save_and_load(self, tmp_path):
        """Settings written to TOML load back with the same values."""
        settings = Settings(reset={"limit": 75, "update_timestamp": True})
        path = tmp_path / "nested" / "tablekit.toml"

        settings.to_toml_file(path)

        loaded = Settings.from_toml_file(path)
        assert loaded.reset.limit == 75
        assert loaded.reset.update_timestamp is True


class TestSettingsLoader:
    """Cached global settings."""

    def test_get_config_is_cached(self, isolated_cwd, monkeypatch):
        """The first load is kept until a reload."""
        monkeypatch.setenv("TABLEKIT_RESET__LIMIT", "10")
        first = get_config()

        monkeypatch.setenv("TABLEKIT_RESET__LIMIT", "20")

        assert get_config() is first
        assert get_config().reset.limit == 10

    def test_reload_config(self, isolated_cwd, monkeypatch):
        """reload_config picks up changed sources."""
        monkeypatch.setenv("TABLEKIT_RESET__LIMIT", "10")
        first = get_config()
        monkeypatch.setenv("TABLEKIT_RESET__LIMIT", "20")

        reloaded = reload_config()

        assert reloaded is not first
        assert reloaded.reset.limit == 20
        assert get_config() is reloaded


class TestConfigureLogging:
    """Logger setup from the logging section."""

    def test_plain_console(self):
        """Without rich the console handler writes JSON."""
        settings = Settings(logging={"level": "DEBUG", "rich_console": False})

        logger = configure_logging(settings)

        assert logger.name == "tablekit"
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert isinstance(logger.handlers[0].formatter, StructuredFormatter)

    def test_log_file(self, tmp_path):
        """A log file gets a JSON file handler."""
        log_file = tmp_path / "tablekit.log"
        settings = Settings(logging={"level": "INFO", "file": str(log_file)})

        logger = configure_logging(settings)
        logger.info("hello")
        for handler in logger.handlers:
            handler.close()

        assert '"message": "hello"' in log_file.read_text(encoding="utf-8")
