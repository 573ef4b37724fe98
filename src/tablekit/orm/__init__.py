"""ORM helpers: the record store protocol, its SQLAlchemy implementation and batch resets."""

from .protocols import RecordStore
from .reset import RecordResetter, ResetCursor, ResetState
from .store import SqlAlchemyRecordStore

__all__ = [
    "RecordResetter",
    "RecordStore",
    "ResetCursor",
    "ResetState",
    "SqlAlchemyRecordStore",
]
