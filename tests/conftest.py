"""
Shared pytest fixtures for the livemigrate tests.

This module provides:
- Host store fixtures (store, sqlite_connection, sqlite_store)
- Orchestration fixtures (registry, migrator, tracer)
- Destination fixtures (transport, destination)
- Time and job status fixtures (clock, job_status)
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import aiosqlite
import pytest
import pytest_asyncio

from livemigrate.config import MigratorConfig
from livemigrate.destination import DestinationRef, InMemoryTransport
from livemigrate.migrator import Migrator
from livemigrate.observability import MockTracer
from livemigrate.registry import TriggerRegistry
from livemigrate.store import InMemoryHostStore, SQLiteHostStore
from tests.fixtures import FakeClock, RecordingJobStatus

# ============================================================================
# Host store fixtures
# ============================================================================


@pytest.fixture
def store() -> InMemoryHostStore:
    """Fresh in-memory host store with tracing disabled."""
    return InMemoryHostStore(enable_tracing=False)


@pytest_asyncio.fixture
async def sqlite_connection() -> AsyncGenerator[aiosqlite.Connection, None]:
    """In-memory SQLite connection, closed after the test."""
    async with aiosqlite.connect(":memory:") as db:
        yield db


@pytest_asyncio.fixture
async def sqlite_store(sqlite_connection: aiosqlite.Connection) -> SQLiteHostStore:
    """Initialized SQLite host store."""
    sqlite_store = SQLiteHostStore(sqlite_connection, enable_tracing=False)
    await sqlite_store.initialize()
    return sqlite_store


# ============================================================================
# Orchestration fixtures
# ============================================================================


@pytest.fixture
def registry() -> TriggerRegistry:
    return TriggerRegistry()


@pytest.fixture
def tracer() -> MockTracer:
    return MockTracer()


@pytest.fixture
def migrator(store: InMemoryHostStore) -> Migrator:
    """Migrator over the in-memory store with tracing disabled."""
    return Migrator(store, MigratorConfig(), enable_tracing=False)


# ============================================================================
# Destination fixtures
# ============================================================================


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport()


@pytest.fixture
def destination(transport: InMemoryTransport) -> DestinationRef:
    return DestinationRef(
        "https://example.firebaseio.com",
        transport=transport,
        enable_tracing=False,
    )


# ============================================================================
# Time and status fixtures
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def job_status() -> RecordingJobStatus:
    return RecordingJobStatus()
