"""SQLAlchemy implementation of the RecordStore protocol.

Saving a record marks its write fields as modified and the instance as
dirty before committing. That way an UPDATE is emitted even when no value
changed, so ``before_update`` mapper events, ``@validates`` hooks and
``onupdate`` column defaults run again for every record. A modification
timestamp listed among the write fields is written back with its current
value, which keeps its ``onupdate`` default from firing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ValidationError
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, load_only
from sqlalchemy.orm.attributes import flag_dirty, flag_modified
from sqlalchemy.sql.elements import ClauseElement

from tablekit.shared.constants import Reset
from tablekit.shared.errors import InvalidArgumentError, InvalidFieldError

logger = logging.getLogger(__name__)

# Key in InstanceState.info holding the errors of the last failed save
_ERRORS_INFO_KEY = "tablekit_errors"


class SqlAlchemyRecordStore:
    """RecordStore over a SQLAlchemy session and a mapped class.

    Args:
        session: Session used for reads and commits
        model: Mapped class of the table
        schema: Optional pydantic model the full record is validated
            against (``from_attributes``) when validation is requested
        display_field: Overrides the display field lookup
    """

    def __init__(
        self,
        session: Session,
        model: type[Any],
        *,
        schema: type[BaseModel] | None = None,
        display_field: str | None = None,
    ) -> None:
        self.session = session
        self.model = model
        self.schema = schema

        mapper = inspect(model)
        if len(mapper.primary_key) != 1:
            raise InvalidArgumentError(
                f"{model.__name__} must have a single column primary key",
                argument="model",
            )
        self._primary_key = mapper.get_property_by_column(mapper.primary_key[0]).key
        self._fields = {attr.key for attr in mapper.column_attrs}
        self._name = getattr(mapper.local_table, "name", model.__name__)
        self._display_field = self._find_display_field(display_field)

    def _find_display_field(self, explicit: str | None) -> str:
        candidate = explicit or getattr(self.model, "__display_field__", None)
        if candidate:
            if candidate not in self._fields:
                raise InvalidFieldError(candidate, table=self._name, operation="display_field")
            return candidate
        for name in Reset.DISPLAY_FIELD_CANDIDATES:
            if name in self._fields:
                return name
        return self._primary_key

    @property
    def name(self) -> str:
        return self._name

    @property
    def primary_key(self) -> str:
        return self._primary_key

    @property
    def display_field(self) -> str:
        return self._display_field

    def has_field(self, field: str) -> bool:
        return field in self._fields

    def _where(self, conditions: Any) -> list[Any]:
        """Turn a mapping of equality filters or a clause sequence into WHERE clauses."""
        if conditions is None:
            return []
        if isinstance(conditions, ClauseElement):
            return [conditions]
        if isinstance(conditions, Mapping):
            clauses = []
            for field, value in conditions.items():
                if not self.has_field(field):
                    raise InvalidFieldError(field, table=self._name, operation="scope")
                clauses.append(getattr(self.model, field) == value)
            return clauses
        return list(conditions)

    def count(self, conditions: Any) -> int:
        stmt = select(func.count()).select_from(self.model).where(*self._where(conditions))
        return int(self.session.scalar(stmt) or 0)

    def fetch_page(
        self,
        fields: Sequence[str],
        conditions: Any,
        limit: int,
        page: int,
    ) -> list[Any]:
        columns = [getattr(self.model, field) for field in fields]
        stmt = (
            select(self.model)
            .options(load_only(*columns))
            .where(*self._where(conditions))
            .order_by(getattr(self.model, self._primary_key).asc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        return list(self.session.scalars(stmt))

    @staticmethod
    def _validate(schema: type[BaseModel], record: Any) -> dict[str, list[str]]:
        try:
            schema.model_validate(record, from_attributes=True)
        except ValidationError as e:
            errors: dict[str, list[str]] = {}
            for error in e.errors():
                field = str(error["loc"][0]) if error["loc"] else "__root__"
                errors.setdefault(field, []).append(error["msg"])
            return errors
        return {}

    def save(self, record: Any, fields: Sequence[str], *, validate: bool) -> bool:
        state = inspect(record)
        state.info.pop(_ERRORS_INFO_KEY, None)

        if validate and self.schema is not None:
            errors = self._validate(self.schema, record)
            if errors:
                # Discard pending changes so a later flush cannot write rejected values
                self.session.rollback()
                state.info[_ERRORS_INFO_KEY] = errors
                return False

        for field in fields:
            if field == self._primary_key:
                continue
            # Deferred or expired attributes must be loaded before they can be flagged
            getattr(record, field)
            flag_modified(record, field)
        flag_dirty(record)

        # Keep the rest of the page loaded; expiring it would refetch every row in full
        expire_on_commit = self.session.expire_on_commit
        self.session.expire_on_commit = False
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning(
                "Saving %s record %r failed: %s",
                self._name,
                state.identity,
                e,
            )
            state.info[_ERRORS_INFO_KEY] = {Reset.DATABASE_ERROR_KEY: [str(e)]}
            return False
        finally:
            self.session.expire_on_commit = expire_on_commit
        return True

    def get_errors(self, record: Any) -> dict[str, list[str]]:
        return dict(inspect(record).info.get(_ERRORS_INFO_KEY, {}))


__all__ = ["SqlAlchemyRecordStore"]
