"""Shared test fixtures."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator

import pytest

from row_graph.core.cache import default_cache


@pytest.fixture
def sqlite_conn() -> Iterator[sqlite3.Connection]:
    """SQLite in-memory connection, closed after the test."""
    conn = sqlite3.connect(":memory:")
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(autouse=True)
def clear_schema_cache() -> Iterator[None]:
    """Keep the process-wide schema cache from leaking between tests."""
    yield
    default_cache.clear()
