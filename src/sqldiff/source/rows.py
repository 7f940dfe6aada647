"""
Streaming row source over a DB-API cursor.
"""

import logging
from collections.abc import Iterator
from typing import Any

from sqldiff.utils.tracing import trace_select

from ..errors import QueryError, ScanError
from ..types import ColumnDescriptor
from .connection import open_cursor
from .dialects import DatabaseType
from .query import TableSpec, build_select

logger = logging.getLogger(__name__)


class RowSource:
    """
    Ordered, lazily fetched rows of one table.

    ``open()`` executes the SELECT and derives the column descriptors;
    iterating yields rows as tuples, fetched ``batch_size`` at a time.
    A source can be iterated once. ``close()`` is safe to call repeatedly.

    Example:
        >>> with RowSource(conn, DatabaseType.MYSQL, TableSpec.parse("users"), side="left") as src:
        ...     for row in src:
        ...         ...
    """

    def __init__(
        self,
        connection: Any,
        db_type: DatabaseType,
        table: TableSpec,
        columns: list[str] | None = None,
        key: str = "id",
        batch_size: int = 1000,
        side: str = "left",
    ):
        """
        Args:
            connection: Open DB-API connection owned by the caller
            db_type: Dialect of ``connection``
            table: Table (and optional filter) to read
            columns: Projection, None for all columns
            key: Ordering column
            batch_size: Rows per ``fetchmany`` round trip
            side: ``left`` or ``right``, used in error messages
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.connection = connection
        self.db_type = db_type
        self.table = table
        self.key = key
        self.batch_size = batch_size
        self.side = side
        self.sql = build_select(db_type, table, columns, key)
        self.columns: list[ColumnDescriptor] = []
        self.rows_read = 0

        self._cursor: Any = None
        self._pending: list[Any] = []
        self._iterated = False

    def open(self) -> "RowSource":
        """
        Execute the query and describe its columns.

        Raises:
            QueryError: the query failed or returned no result set
            ScanError: the first batch of a server-side cursor could not
                be fetched
        """
        with trace_select(self.sql, self.table.table, self.db_type.value):
            try:
                self._cursor = open_cursor(self.db_type, self.connection, f"sqldiff_{self.side}")
                self._cursor.execute(self.sql)
            except Exception as e:
                self.close()
                raise QueryError(f"query failed: {self.sql}: {e}", sql=self.sql) from e

            description = self._cursor.description
            if description is None:
                # Server-side cursors only describe the result after a fetch
                try:
                    self._pending = list(self._fetch())
                except ScanError:
                    self.close()
                    raise
                description = self._cursor.description

        if description is None:
            self.close()
            raise QueryError(f"query returned no result set: {self.sql}", sql=self.sql)

        self.columns = self.db_type.describe(description, self.db_type.column_flags(self._cursor))
        logger.debug(
            f"Opened {self.side} source: {self.sql} "
            f"({len(self.columns)} columns: {', '.join(c.name for c in self.columns)})"
        )
        return self

    def __iter__(self) -> Iterator[tuple]:
        if self._cursor is None:
            raise RuntimeError("RowSource must be opened before iterating")
        if self._iterated:
            raise RuntimeError("RowSource can only be iterated once")
        self._iterated = True
        return self._rows()

    def _fetch(self) -> list[Any]:
        try:
            return self._cursor.fetchmany(self.batch_size)
        except Exception as e:
            raise ScanError(
                f"{self.side} row {self.rows_read} scan failed ({self.table}): {e}",
                side=self.side,
                row_index=self.rows_read,
            ) from e

    def _rows(self) -> Iterator[tuple]:
        batch = self._pending
        self._pending = []
        while True:
            if not batch:
                batch = self._fetch()
                if not batch:
                    return
            for row in batch:
                self.rows_read += 1
                yield tuple(row)
            batch = []

    def close(self) -> None:
        """Close the cursor; the connection stays with its owner."""
        cursor, self._cursor = self._cursor, None
        if cursor is None:
            return
        try:
            cursor.close()
        except Exception as e:
            logger.warning(f"Error closing {self.side} cursor: {e}")

    def __enter__(self) -> "RowSource":
        if self._cursor is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
