"""Configuration domain models."""

from __future__ import annotations

from .reset_settings import ResetCallback, ResetConfig, ResetSettings
from .settings import LoggingSettings, Settings

__all__ = [
    "LoggingSettings",
    "ResetCallback",
    "ResetConfig",
    "ResetSettings",
    "Settings",
]
