"""Shared test fixtures and utilities for wikistore tests.

This module contains common test fixtures, helper classes, and utilities
that are used across multiple test files.
"""

import tempfile
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from wikistore.store import ConnectionFactory, MemoryCache, PageStore
from wikistore.store.schema import BlobFile
from wikistore.types import UploadedFile

START_TIME = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, start: datetime = START_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


# Test fixtures
@pytest.fixture
def temp_db_url() -> str:
    """Provide a temporary database URL for testing."""
    temp_file = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    temp_file.close()
    return f"sqlite:///{temp_file.name}"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def connections(temp_db_url: str) -> ConnectionFactory:
    """Provide a fresh database for each test."""
    factory = ConnectionFactory(temp_db_url, drop_previous=True)
    yield factory
    factory.dispose()


@pytest.fixture
def cache(clock: FakeClock) -> MemoryCache:
    return MemoryCache(clock=clock)


@pytest.fixture
def store(
    connections: ConnectionFactory, cache: MemoryCache, clock: FakeClock
) -> PageStore:
    """Provide a PageStore whose timestamps and cache expiry follow ``clock``."""
    return PageStore(connections, cache=cache, clock=clock)


@pytest.fixture
def upload() -> UploadedFile:
    """A small PNG-named upload."""
    return UploadedFile(filename="diagram.png", data=b"\x89PNG fake image bytes")


@pytest.fixture
def blob_count() -> Callable[[Session], int]:
    """Count the blobs visible to a session."""

    def count(session: Session) -> int:
        return session.scalar(select(func.count()).select_from(BlobFile))

    return count
