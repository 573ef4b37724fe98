"""System-level defaults for reset runs and logging."""

from __future__ import annotations


class Reset:
    """Batch reset defaults."""

    DEFAULT_LIMIT = 100  # records per page
    MIN_LIMIT = 1
    DEFAULT_VALIDATION = True
    DEFAULT_UPDATE_TIMESTAMP = False

    # Columns treated as the modification timestamp, first match wins
    TIMESTAMP_FIELDS = ("modified", "updated", "modified_at", "updated_at")

    # Columns tried as display field when the model does not declare one
    DISPLAY_FIELD_CANDIDATES = ("name", "title", "label")

    # Key under which store-level (non field) errors are reported
    DATABASE_ERROR_KEY = "_database"


class Logging:
    """Logging configuration constants."""

    DEFAULT_LEVEL = "INFO"
    DEFAULT_LOGGER_NAME = "tablekit"
    TIME_FORMAT = "[%H:%M:%S]"


__all__ = ["Logging", "Reset"]
