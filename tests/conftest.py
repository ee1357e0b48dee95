"""Shared pytest fixtures for all test suites."""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tests.support import World, build_world
from tripsync.db.models import Base


@pytest.fixture
def world() -> World:
    """Seeded in-memory world with a 25-minute route provider."""
    return build_world()


@pytest.fixture
def sqlite_session_factory() -> Generator[sessionmaker[Session], None, None]:
    """Session factory over a shared in-memory SQLite database.

    Usage:
        def test_something(sqlite_session_factory):
            store = SqlScheduleStore(sqlite_session_factory)
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    Base.metadata.drop_all(engine)
    engine.dispose()
