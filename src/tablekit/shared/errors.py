"""tablekit Error Handling Module

This module defines the error handling system for tablekit, providing
structured error classes with context information.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Error codes for tablekit.

    This enum serves as the single source of truth for all error codes
    used throughout the library.
    """

    # Caller contract errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_FIELD = "INVALID_FIELD"

    # Persistence errors
    PERSIST_FAILURE = "PERSIST_FAILURE"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIG_MISSING = "CONFIG_MISSING"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data so the context can always be serialized into logs.

    Attributes:
        operation: Optional operation name that caused the error
        table: Optional table (mapped model) name the error relates to
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    table: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            object.__setattr__(self, "additional_data", _coerce_primitives(self.additional_data))

    def safe_dict(self) -> dict[str, Any]:
        """Export context as dict for logging.

        Returns:
            Dictionary with the set fields and a guaranteed additional_data key.
        """
        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation
        if self.table is not None:
            data["table"] = self.table
        data["additional_data"] = self.additional_data or {}
        return data


class TablekitError(Exception):
    """Base exception class for all tablekit errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize TablekitError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(TablekitError):
    """Domain-specific errors.

    Raised when a caller breaks a contract of a helper, e.g. asks for a
    progress bar narrower than three cells or names a field the table
    does not have.
    """


class InfrastructureError(TablekitError):
    """Infrastructure-related errors.

    Raised when the underlying store rejects an operation.
    """


class ApplicationError(TablekitError):
    """Application-level errors, typically configuration problems."""


class InvalidArgumentError(DomainError, ValueError):
    """An argument is outside the range a helper accepts."""

    def __init__(
        self,
        message: str,
        argument: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(ErrorCode.INVALID_ARGUMENT, message, context)
        self.argument = argument


class InvalidFieldError(DomainError):
    """A requested field does not exist on the target table."""

    def __init__(
        self,
        field: str,
        table: str | None = None,
        operation: str | None = None,
    ) -> None:
        context = ErrorContext(
            operation=operation,
            table=table,
            additional_data={"field": field},
        )
        super().__init__(
            ErrorCode.INVALID_FIELD,
            f"Table {table or '?'} does not have field {field}",
            context,
        )
        self.field = field


class PersistFailureError(InfrastructureError):
    """A record failed validation or could not be saved.

    Attributes:
        errors: Field name to list of messages, as reported by the store
        record_id: Primary key value of the failing record
    """

    def __init__(
        self,
        errors: dict[str, list[str]],
        record_id: Any = None,
        table: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        additional_data: dict[str, PrimitiveContextValue] = {
            "fields": ", ".join(sorted(errors)),
        }
        if record_id is not None:
            additional_data["record_id"] = str(record_id)
        context = ErrorContext(
            operation="reset_records",
            table=table,
            additional_data=additional_data,
        )
        super().__init__(
            ErrorCode.PERSIST_FAILURE,
            f"Record {record_id!r} could not be saved: {errors}",
            context,
            original_error,
        )
        self.errors = errors
        self.record_id = record_id


def create_config_error(
    message: str,
    config_key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"config_key": config_key} if config_key else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return ApplicationError(
        ErrorCode.CONFIG_ERROR,
        message,
        context,
        original_error,
    )
