"""Shared test fixtures."""

from __future__ import annotations

import pytest
from fakes import COLUMNS, ROWS, CountingCursor, FakeConnection, FakeDataSource

from row_runner.core.connection import ConnectionConfig
from row_runner.core.runner import QueryRunner


@pytest.fixture
def cursor() -> CountingCursor:
    """Cursor over the standard three-column, two-row table."""
    return CountingCursor(COLUMNS, ROWS)


@pytest.fixture
def empty_cursor() -> CountingCursor:
    return CountingCursor(COLUMNS, [])


@pytest.fixture
def fake_connection() -> FakeConnection:
    return FakeConnection(parameter_count=2)


@pytest.fixture
def fake_source(fake_connection: FakeConnection) -> FakeDataSource:
    return FakeDataSource(fake_connection)


@pytest.fixture
def runner(fake_source: FakeDataSource) -> QueryRunner:
    return QueryRunner(fake_source)


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config (one pooled connection)."""
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)
