"""tablekit Configuration Module

Unified access to the settings registry and the reset configuration:
- Settings: registry read from environment, .env and TOML
- ResetConfig: immutable reset configuration, resolved once
- Loader functions: get_config, load_settings, reload_config, configure_logging
"""

from __future__ import annotations

from .loader import (
    SettingsLoader,
    configure_logging,
    get_config,
    load_settings,
    reload_config,
)
from .models import (
    LoggingSettings,
    ResetCallback,
    ResetConfig,
    ResetSettings,
    Settings,
)

__all__ = [
    "LoggingSettings",
    "ResetCallback",
    "ResetConfig",
    "ResetSettings",
    "Settings",
    "SettingsLoader",
    "configure_logging",
    "get_config",
    "load_settings",
    "reload_config",
]
