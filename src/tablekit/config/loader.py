"""Settings loader and singleton manager.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- Thread-safe singleton pattern for the Settings registry
- Logging setup from the loaded settings
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from tablekit.config.models.settings import Settings
from tablekit.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    create_config_error,
)
from tablekit.shared.logging import setup_structured_logger

CONFIG_FILE_ENV = "TABLEKIT_CONFIG_FILE"

DEFAULT_CONFIG_PATHS = (
    Path("config/tablekit.toml"),
    Path("tablekit.toml"),
)


class SettingsLoader:
    """Thread-safe singleton manager for Settings.

    Uses double-checked locking pattern to ensure thread-safety
    while minimizing lock overhead.
    """

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        """Get the global settings instance, loading it if necessary."""
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()

        return self._instance

    def reload_config(self) -> Settings:
        """Reload the global settings instance from configuration sources."""
        with self._lock:
            self._instance = load_settings()

        return self._instance

    def reset(self) -> None:
        """Drop the cached instance so the next access reloads it."""
        with self._lock:
            self._instance = None


def _load_env_file(env_file: Path = Path(".env")) -> None:
    """Load environment variables from a .env file when one exists."""
    if env_file.exists():
        load_dotenv(env_file, override=False)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML configuration file or the environment.

    Args:
        config_path: Optional path to a TOML file. Falls back to the
            ``TABLEKIT_CONFIG_FILE`` variable, then to the default locations.

    Returns:
        Settings instance loaded from the first available source

    Raises:
        ApplicationError: If an explicitly named file does not exist
            (CONFIG_MISSING) or a value is invalid (CONFIG_ERROR)
    """
    _load_env_file()

    explicit = config_path or os.environ.get(CONFIG_FILE_ENV)
    try:
        if explicit:
            try:
                return Settings.from_toml_file(explicit)
            except FileNotFoundError as e:
                raise ApplicationError(
                    code=ErrorCode.CONFIG_MISSING,
                    message=str(e),
                    context=ErrorContext(
                        operation="load_settings",
                        additional_data={"config_path": str(explicit)},
                    ),
                    original_error=e,
                ) from e

        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                return Settings.from_toml_file(default_path)

        return Settings()
    except ValidationError as e:
        raise create_config_error(
            f"Invalid settings: {e.error_count()} error(s)",
            config_key=".".join(str(part) for part in e.errors()[0]["loc"]),
            operation="load_settings",
            original_error=e,
        ) from e


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Set up the tablekit logger from the logging section of the settings."""
    settings = settings or get_config()
    return setup_structured_logger(
        level=settings.logging.level,
        log_file=settings.logging.file,
        use_rich_console=settings.logging.rich_console,
    )


# Global loader instance
_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance (thread-safe)."""
    return _loader.get_config()


def reload_config() -> Settings:
    """Reload the global settings instance from configuration sources."""
    return _loader.reload_config()


__all__ = [
    "SettingsLoader",
    "configure_logging",
    "get_config",
    "load_settings",
    "reload_config",
]
