"""Batch reset of table records.

Re-saves every record of a table (or of a scope of it) page by page so
that persistence hooks such as slugging, geocoding or versioning run again
for records that were stored before the hook existed.

By default only the primary key and the display field are re-saved and the
modification timestamp is carried through unchanged. Pages are fetched in
primary key order until an empty page comes back; an optional timeout
between pages throttles the load on the database.

There is no transaction around the whole run. A failing record stops the
run with PersistFailureError, and records saved before it stay saved, so
callbacks should be idempotent and a failed run can simply be repeated.

Example:
    >>> store = SqlAlchemyRecordStore(session, Article)
    >>> resetter = RecordResetter(store, ResetConfig.resolve(limit=500, timeout=1))
    >>> resetter.run()
    1250
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel
from sqlalchemy.orm import Session

from tablekit.config import ResetConfig, ResetSettings, get_config
from tablekit.helpers.progress import format_percentage
from tablekit.orm.protocols import RecordStore
from tablekit.orm.store import SqlAlchemyRecordStore
from tablekit.shared.constants import Reset
from tablekit.shared.errors import (
    InvalidArgumentError,
    InvalidFieldError,
    PersistFailureError,
    TablekitError,
    create_config_error,
)
from tablekit.shared.logging import (
    log_operation_error,
    log_operation_start,
    log_operation_success,
)

logger = logging.getLogger(__name__)

OPERATION = "reset_records"


class ResetState(str, Enum):
    """Lifecycle of a RecordResetter run."""

    IDLE = "idle"
    PAGING = "paging"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ResetCursor:
    """Position of a running reset: next page to fetch and counters."""

    page: int = 1
    fetched: int = 0
    modified: int = 0


class RecordResetter:
    """Re-save the records of a store page by page.

    Args:
        store: Table to reset
        config: Resolved configuration, defaults to the built-in defaults
    """

    def __init__(self, store: RecordStore, config: ResetConfig | None = None) -> None:
        self.store = store
        self.config = config or ResetConfig()
        self.state = ResetState.IDLE
        self.cursor = ResetCursor()
        self._callback = self._resolve_callback(self.config.callback)

    @classmethod
    def for_model(
        cls,
        session: Session,
        model: type[Any],
        *,
        registry: ResetSettings | Mapping[str, Any] | None = None,
        schema: type[BaseModel] | None = None,
        **overrides: Any,
    ) -> RecordResetter:
        """Build a resetter for a mapped class.

        The registry layer defaults to the ``reset`` section of the global
        settings; ``overrides`` take precedence over it.
        """
        if registry is None:
            registry = get_config().reset
        store = SqlAlchemyRecordStore(session, model, schema=schema)
        return cls(store, ResetConfig.resolve(registry, **overrides))

    def _resolve_callback(self, callback: Any) -> Callable[..., Any] | None:
        if callback is None or callable(callback):
            return callback
        method = getattr(self.store, callback, None)
        if not callable(method):
            raise create_config_error(
                f"Reset callback '{callback}' is not a method of {type(self.store).__name__}",
                config_key="callback",
                operation=OPERATION,
            )
        return method

    def _check_fields(self, fields: Sequence[str]) -> None:
        for field in fields:
            if not self.store.has_field(field):
                raise InvalidFieldError(field, table=self.store.name, operation=OPERATION)

    def _read_fields(self, fields: Sequence[str] | None) -> tuple[list[str], list[str]]:
        """Return the fields to load and the timestamp field to carry through."""
        primary_key = self.store.primary_key
        explicit = tuple(fields) if fields is not None else self.config.fields
        self._check_fields(explicit)
        self._check_fields(self.config.update_fields)

        if explicit:
            read = [primary_key, *explicit]
        else:
            read = [primary_key, self.store.display_field]

        timestamp: list[str] = []
        if not self.config.update_timestamp:
            for name in Reset.TIMESTAMP_FIELDS:
                if self.store.has_field(name):
                    timestamp.append(name)
                    read.append(name)
                    break

        return list(dict.fromkeys(read)), timestamp

    def _write_fields(self, read: list[str], timestamp: list[str]) -> list[str]:
        if self.config.update_fields:
            write = [*timestamp, *self.config.update_fields]
        else:
            write = list(read)
        write.append(self.store.primary_key)
        return list(dict.fromkeys(write))

    def _time_budget(self, count: int) -> float | None:
        # Advisory only: about one second per record, never less than configured
        if self.config.time_limit is None:
            return None
        return max(self.config.time_limit, float(count))

    def _reset_record(self, record: Any, write_fields: list[str]) -> bool:
        """Save one record. Returns False if the callback vetoed it."""
        fields = list(write_fields)
        if self._callback is not None:
            result = self._callback(record, list(fields))
            if not result:
                return False
            if isinstance(result, tuple):
                proceed, new_fields = result
                if not proceed:
                    return False
                if new_fields is not None:
                    self._check_fields(new_fields)
                    fields = list(dict.fromkeys([*new_fields, self.store.primary_key]))

        if not self.store.save(record, fields, validate=self.config.validation):
            raise PersistFailureError(
                self.store.get_errors(record),
                record_id=getattr(record, self.store.primary_key, None),
                table=self.store.name,
            )
        return True

    def run(
        self,
        *,
        limit: int | None = None,
        fields: Sequence[str] | None = None,
        conditions: Any = None,
    ) -> int:
        """Reset all records matching the scope.

        Any error leaves the resetter in the FAILED state.

        Args:
            limit: Page size for this run, defaults to the configured limit
            fields: Fields to read for this run instead of the configured ones
            conditions: Scope for this run instead of the configured one

        Returns:
            Number of records saved; records vetoed by the callback are not counted

        Raises:
            InvalidArgumentError: If limit is below one
            InvalidFieldError: If a requested field does not exist, before any
                record is read
            PersistFailureError: If a record fails to save; earlier records stay saved
        """
        self.cursor = ResetCursor()
        try:
            return self._run(limit, fields, conditions)
        except Exception as e:
            self.state = ResetState.FAILED
            if isinstance(e, TablekitError):
                log_operation_error(
                    logger,
                    e,
                    OPERATION,
                    {"page": self.cursor.page, "modified": self.cursor.modified},
                )
            else:
                logger.error(
                    "Reset of %s failed on page %d: %s",
                    self.store.name,
                    self.cursor.page,
                    e,
                    extra={"operation": OPERATION},
                )
            raise

    def _run(self, limit: int | None, fields: Sequence[str] | None, conditions: Any) -> int:
        limit = self.config.limit if limit is None else limit
        if limit < Reset.MIN_LIMIT:
            raise InvalidArgumentError(f"Page size must be at least {Reset.MIN_LIMIT}, got {limit}", argument="limit")
        if conditions is None:
            conditions = self.config.scope

        read_fields, timestamp = self._read_fields(fields)
        write_fields = self._write_fields(read_fields, timestamp)

        self.state = ResetState.PAGING
        total = self.store.count(conditions)
        budget = self._time_budget(total)
        log_operation_start(
            logger,
            OPERATION,
            {"table": self.store.name, "total": total, "limit": limit, "fields": read_fields},
        )

        cursor = self.cursor
        started = time.monotonic()
        over_budget = False
        while records := self.store.fetch_page(read_fields, conditions, limit, cursor.page):
            for record in records:
                if self._reset_record(record, write_fields):
                    cursor.modified += 1
            cursor.fetched += len(records)

            logger.info(
                "Reset %s page %d: %d/%d records (%s)",
                self.store.name,
                cursor.page,
                cursor.fetched,
                total,
                format_percentage(cursor.fetched / total if total else 1.0),
            )
            cursor.page += 1

            elapsed = time.monotonic() - started
            if budget is not None and elapsed > budget and not over_budget:
                over_budget = True
                logger.warning(
                    "Reset of %s exceeded its time budget of %.0fs after %d records",
                    self.store.name,
                    budget,
                    cursor.fetched,
                )

            if self.config.timeout:
                time.sleep(self.config.timeout)

        self.state = ResetState.DONE
        log_operation_success(
            logger,
            OPERATION,
            (time.monotonic() - started) * 1000,
            {"modified": cursor.modified, "pages": cursor.page - 1},
            {"table": self.store.name},
        )
        return cursor.modified


__all__ = [
    "RecordResetter",
    "ResetCursor",
    "ResetState",
]
