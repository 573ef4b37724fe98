"""Persistence protocol for batch resets.

RecordResetter only talks to a table through this interface, so any store
able to count, page and save records can be reset, not just SQLAlchemy
mapped classes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RecordStore(Protocol):
    """Protocol for a table whose records can be re-saved in pages.

    Example:
        >>> from tablekit.orm import SqlAlchemyRecordStore
        >>>
        >>> store: RecordStore = SqlAlchemyRecordStore(session, Article)
        >>> store.count(())
        250
    """

    @property
    def name(self) -> str:
        """Table name, used in errors and logs."""

    @property
    def primary_key(self) -> str:
        """Name of the primary key field."""

    @property
    def display_field(self) -> str:
        """Name of the field that identifies a record to humans."""

    def has_field(self, field: str) -> bool:
        """Return True if the table has a field called ``field``."""

    def count(self, conditions: Any) -> int:
        """Count the records matching ``conditions``."""

    def fetch_page(
        self,
        fields: Sequence[str],
        conditions: Any,
        limit: int,
        page: int,
    ) -> list[Any]:
        """Fetch page ``page`` (1-indexed) of up to ``limit`` records.

        Records are ordered by primary key ascending and have at least
        ``fields`` loaded.
        """

    def save(self, record: Any, fields: Sequence[str], *, validate: bool) -> bool:
        """Persist ``record`` restricted to ``fields``.

        Returns:
            False if validation or the save failed; the details are then
            available from ``get_errors``
        """

    def get_errors(self, record: Any) -> dict[str, list[str]]:
        """Field errors of the last failed save of ``record``."""
