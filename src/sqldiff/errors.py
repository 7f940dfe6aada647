"""
Error taxonomy for sqldiff.

Every failure is fatal to the diff run that raised it; nothing is retried.
The CLI maps any ``SqlDiffError`` to exit status 2.
"""


class SqlDiffError(Exception):
    """Base class for all sqldiff failures."""


class ConfigError(SqlDiffError):
    """Invalid connection string or connection file."""


class DatabaseConnectionError(SqlDiffError, ConnectionError):
    """The database could not be opened or reached."""


class QueryError(SqlDiffError):
    """A SELECT could not be built, executed or described."""

    def __init__(self, message: str, sql: str | None = None):
        super().__init__(message)
        self.sql = sql


class ScanError(SqlDiffError):
    """A row could not be fetched or decoded mid-stream."""

    def __init__(self, message: str, side: str | None = None, row_index: int | None = None):
        super().__init__(message)
        self.side = side
        self.row_index = row_index


class UnsupportedTypeError(SqlDiffError):
    """A column kind the normalizer was never taught to compare."""

    def __init__(self, type_name: str, column: str | None = None):
        where = f" (column {column!r})" if column else ""
        super().__init__(f"unsupported: {type_name}{where}")
        self.type_name = type_name
        self.column = column
