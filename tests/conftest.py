"""
Pytest configuration and fixtures for sqldiff tests.
Provides fake DB-API cursors/connections and shared column layouts.
"""

from typing import Any

import pytest

from sqldiff.types import ColumnDescriptor, ScanType


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


class FakeResult:
    """MySQLdb result object double exposing column flags."""

    def __init__(self, flags: list[int]):
        self._flags = tuple(flags)

    def field_flags(self) -> tuple[int, ...]:
        return self._flags


class FakeCursor:
    """DB-API cursor double serving canned rows through fetchmany."""

    def __init__(
        self,
        description: list[tuple] | None,
        rows: list[tuple] | None = None,
        execute_error: Exception | None = None,
        fetch_error_after: int | None = None,
        describe_after_fetch: bool = False,
        field_flags: list[int] | None = None,
    ):
        self._description = description
        self.rows = list(rows or [])
        self.execute_error = execute_error
        self.fetch_error_after = fetch_error_after
        self.describe_after_fetch = describe_after_fetch
        self.executed: list[str] = []
        self.fetch_sizes: list[int] = []
        self.closed = False
        self._fetched = False
        self._position = 0
        if field_flags is not None:
            self._result = FakeResult(field_flags)

    @property
    def description(self):
        if self.describe_after_fetch and not self._fetched:
            return None
        return self._description

    def execute(self, sql: str) -> None:
        self.executed.append(sql)
        if self.execute_error is not None:
            raise self.execute_error

    def fetchmany(self, size: int) -> list[tuple]:
        self._fetched = True
        self.fetch_sizes.append(size)
        if self.fetch_error_after is not None and self._position >= self.fetch_error_after:
            raise RuntimeError("Lost connection to server during query")
        batch = self.rows[self._position:self._position + size]
        if self.fetch_error_after is not None:
            batch = batch[:max(0, self.fetch_error_after - self._position)]
        self._position += len(batch)
        return batch

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    """DB-API connection double handing out one prepared cursor."""

    def __init__(self, cursor: FakeCursor):
        self._cursor = cursor
        self.cursor_kwargs: dict[str, Any] = {}
        self.closed = False

    def cursor(self, *args, **kwargs) -> FakeCursor:
        self.cursor_kwargs = kwargs
        return self._cursor

    def close(self) -> None:
        self.closed = True


def pg_description(*columns: tuple[str, int]) -> list[tuple]:
    """psycopg2-style description: (name, oid, None, None, None, None, None)."""
    return [(name, oid, None, None, None, None, None) for name, oid in columns]


@pytest.fixture
def id_name_columns() -> list[ColumnDescriptor]:
    """Two-column layout: integer key plus a text column."""
    return [
        ColumnDescriptor("id", ScanType.INT32),
        ColumnDescriptor("name", ScanType.RAW_BYTES),
    ]


@pytest.fixture
def audit_columns() -> list[ColumnDescriptor]:
    """Layout with the audit columns ignored by --modified."""
    return [
        ColumnDescriptor("id", ScanType.INT32),
        ColumnDescriptor("name", ScanType.RAW_BYTES),
        ColumnDescriptor("created", ScanType.NULL_TIME),
        ColumnDescriptor("created_user", ScanType.NULL_INT32),
        ColumnDescriptor("modified", ScanType.NULL_TIME),
        ColumnDescriptor("modified_user", ScanType.NULL_INT32),
    ]
