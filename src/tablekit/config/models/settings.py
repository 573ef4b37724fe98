"""tablekit Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

from pathlib import Path

import toml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tablekit.config.models.reset_settings import ResetSettings
from tablekit.shared.constants import Logging


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default=Logging.DEFAULT_LEVEL, description="Logging level")
    file: str | None = Field(default=None, description="JSON log file path")
    rich_console: bool = Field(default=True, description="Render console logs through rich")


class Settings(BaseSettings):
    """Settings facade, the registry the reset defaults are read from."""

    model_config = SettingsConfigDict(
        env_prefix="TABLEKIT_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    reset: ResetSettings = Field(default_factory=ResetSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from a TOML file; the environment fills in values the file leaves unset."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(exclude_none=True)

        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)


__all__ = [
    "LoggingSettings",
    "Settings",
]
