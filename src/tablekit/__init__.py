"""
tablekit - helpers for SQLAlchemy tables and console output

Percentage and progress bar rendering, batch re-saving of table records
to re-trigger persistence hooks, and an output capture sink for tests.
"""

__version__ = "0.1.0"

from .config import ResetConfig
from .helpers import ProgressBar, calculate_percentage, format_percentage
from .orm import RecordResetter, RecordStore, SqlAlchemyRecordStore

__all__ = [
    "ProgressBar",
    "RecordResetter",
    "RecordStore",
    "ResetConfig",
    "SqlAlchemyRecordStore",
    "calculate_percentage",
    "format_percentage",
]
