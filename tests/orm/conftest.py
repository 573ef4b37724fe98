"""Fixtures for record reset tests: an in-memory RecordStore."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest


@dataclass
class FakeRecord:
    id: int
    name: str
    status: str = "active"
    modified: str = "2020-01-01 00:00:00"


class FakeStore:
    """RecordStore over a list, recording every call it receives."""

    name = "fake_records"
    primary_key = "id"
    display_field = "name"

    def __init__(self, total: int, *, fields: tuple[str, ...] = ("id", "name", "status", "modified")) -> None:
        self.records = [FakeRecord(index, f"Record {index}") for index in range(1, total + 1)]
        self.fields = set(fields)
        self.fail_ids: set[int] = set()
        self.count_calls: list[Any] = []
        self.page_calls: list[dict[str, Any]] = []
        self.page_sizes: list[int] = []
        self.saved: list[tuple[int, list[str], bool]] = []
        self._errors: dict[int, dict[str, list[str]]] = {}

    def has_field(self, field: str) -> bool:
        return field in self.fields

    def _matching(self, conditions: Any) -> list[FakeRecord]:
        if not conditions:
            return list(self.records)
        return [
            record
            for record in self.records
            if all(getattr(record, key) == value for key, value in conditions.items())
        ]

    def count(self, conditions: Any) -> int:
        self.count_calls.append(conditions)
        return len(self._matching(conditions))

    def fetch_page(self, fields, conditions, limit, page):
        self.page_calls.append({"fields": list(fields), "conditions": conditions, "limit": limit, "page": page})
        rows = self._matching(conditions)[(page - 1) * limit : page * limit]
        self.page_sizes.append(len(rows))
        return rows

    def save(self, record, fields, *, validate):
        self.saved.append((record.id, list(fields), validate))
        if record.id in self.fail_ids:
            self._errors[record.id] = {"name": ["must not be empty"]}
            return False
        return True

    def get_errors(self, record):
        return self._errors.get(record.id, {})

    def touch(self, record, fields):
        """Callback usable by name: skip inactive records."""
        return record.status == "active", fields


@pytest.fixture
def make_store():
    """Factory for FakeStore instances."""
    return FakeStore
