"""Batch reset configuration models.

Two models live here:

- ResetSettings: the registry layer, read from environment or TOML. Every
  field is optional; only values that are set take part in the merge.
- ResetConfig: the resolved, immutable configuration a RecordResetter is
  built with. ``ResetConfig.resolve`` performs the three-layer merge
  (defaults < registry < overrides) exactly once.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tablekit.shared.constants import Reset
from tablekit.shared.errors import create_config_error

# Callback contract: (record, write_fields) -> (proceed, write_fields) | falsy
ResetCallback = Callable[[Any, list[str]], Any]


class ResetSettings(BaseModel):
    """Registry layer for reset defaults.

    Values left as None fall through to the built-in defaults. Scope can
    only hold equality filters here since SQL expressions are not
    expressible in env or TOML.
    """

    limit: int | None = Field(default=None, ge=Reset.MIN_LIMIT, description="Records per page")
    timeout: float | None = Field(default=None, ge=0, description="Seconds to sleep between pages")
    fields: list[str] | None = Field(default=None, description="Fields to read")
    update_fields: list[str] | None = Field(default=None, description="Fields to write")
    validation: bool | None = Field(default=None, description="Validate records before saving")
    update_timestamp: bool | None = Field(default=None, description="Bump the modification timestamp")
    scope: dict[str, Any] | None = Field(default=None, description="Equality filters")
    time_limit: float | None = Field(default=None, ge=0, description="Advisory time budget in seconds")


class ResetConfig(BaseModel):
    """Resolved configuration of a batch reset.

    Attributes:
        limit: Records per page
        timeout: Seconds to sleep after each page, None for no delay
        fields: Fields to read besides the primary key (default: display field)
        update_fields: Fields to write (default: the read fields)
        validation: Run validation before each save
        update_timestamp: Let the store bump the modification timestamp
        scope: Mapping of equality filters or sequence of SQL clauses
        callback: Per-record callback, or the name of a method on the store
        time_limit: Advisory execution budget in seconds
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="forbid")

    limit: int = Field(default=Reset.DEFAULT_LIMIT, ge=Reset.MIN_LIMIT)
    timeout: float | None = Field(default=None, ge=0)
    fields: tuple[str, ...] = ()
    update_fields: tuple[str, ...] = ()
    validation: bool = Reset.DEFAULT_VALIDATION
    update_timestamp: bool = Reset.DEFAULT_UPDATE_TIMESTAMP
    scope: Any = ()
    callback: Union[ResetCallback, str, None] = None
    time_limit: float | None = Field(default=None, ge=0)

    @field_validator("scope", mode="before")
    @classmethod
    def _freeze_scope(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, Mapping):
            return MappingProxyType(dict(value))
        if isinstance(value, (list, tuple)):
            return tuple(value)
        # A single SQL clause
        return (value,)

    @classmethod
    def resolve(
        cls,
        registry: ResetSettings | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> ResetConfig:
        """Merge defaults, registry values and caller overrides.

        Args:
            registry: Registry layer, usually ``get_config().reset``
            **overrides: Caller supplied values, highest precedence

        Returns:
            The immutable configuration

        Raises:
            ApplicationError: If the merged values are invalid
        """
        values: dict[str, Any] = {}
        if isinstance(registry, BaseModel):
            values.update(registry.model_dump(exclude_none=True))
        elif registry is not None:
            values.update({key: value for key, value in registry.items() if value is not None})
        values.update(overrides)

        try:
            return cls(**values)
        except ValidationError as e:
            raise create_config_error(
                f"Invalid reset configuration: {e.error_count()} error(s)",
                config_key=", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"]),
                operation="resolve_reset_config",
                original_error=e,
            ) from e


__all__ = [
    "ResetCallback",
    "ResetConfig",
    "ResetSettings",
]
