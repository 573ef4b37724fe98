"""
Pytest configuration and shared fixtures for tablekit tests.

Provides an in-memory SQLite database with a small ``articles`` table whose
``before_update`` listener rebuilds the slug, so tests can observe that a
reset re-triggers persistence hooks.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Generator
from datetime import datetime

import pytest
from sqlalchemy import String, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from tablekit.config.loader import _loader
from tablekit.testing import ConsoleOutput

FIXED_TIMESTAMP = datetime(2020, 1, 1, 12, 0, 0)


class Base(DeclarativeBase):
    pass


class Article(Base):
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str | None] = mapped_column(String(120), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="draft")
    updated_at: Mapped[datetime] = mapped_column(default=datetime.now, onupdate=datetime.now)


class Tag(Base):
    __tablename__ = "tags"
    __display_field__ = "label"

    id: Mapped[int] = mapped_column(primary_key=True)
    label: Mapped[str] = mapped_column(String(50))


def slugify(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


@pytest.fixture
def fixed_timestamp() -> datetime:
    """Timestamp the articles fixture stores on every row."""
    return FIXED_TIMESTAMP


@pytest.fixture
def article_model() -> type[Article]:
    """Mapped class of the articles table."""
    return Article


@pytest.fixture
def tag_model() -> type[Tag]:
    """Mapped class of the tags table, which declares its display field."""
    return Tag


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """Session bound to a fresh in-memory SQLite database."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    with Session(engine) as db_session:
        yield db_session
    engine.dispose()


@pytest.fixture
def slug_listener() -> Generator[list[int], None, None]:
    """Register a before_update hook that rebuilds slugs; yields the ids it saw."""
    seen: list[int] = []

    def rebuild_slug(mapper, connection, target):
        seen.append(target.id)
        target.slug = slugify(target.title)

    event.listen(Article, "before_update", rebuild_slug)
    yield seen
    event.remove(Article, "before_update", rebuild_slug)


@pytest.fixture
def articles(session: Session) -> list[Article]:
    """Five stored articles without slugs and with a fixed timestamp."""
    titles = ["Hello World", "Second Post", "On Paging", "Reset All The Things", "Last One"]
    rows = [
        Article(id=index, title=title, status="published" if index % 2 else "draft", updated_at=FIXED_TIMESTAMP)
        for index, title in enumerate(titles, start=1)
    ]
    session.add_all(rows)
    session.commit()
    return rows


@pytest.fixture
def console_output() -> ConsoleOutput:
    """Capture sink for console output."""
    return ConsoleOutput()


@pytest.fixture(autouse=True)
def _reset_global_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from the process environment and cached settings."""
    for name in list(os.environ):
        if name.startswith("TABLEKIT_"):
            monkeypatch.delenv(name)
    _loader.reset()
    yield
    _loader.reset()
    package_logger = logging.getLogger("tablekit")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
