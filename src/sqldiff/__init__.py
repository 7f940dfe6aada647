"""
sqldiff: row-level comparison of two tables that share an ordering key

Typical use is checking a snapshot against the live table after a
migration::

    CREATE TABLE bak_users AS SELECT * FROM users;
    -- migrate ...
    sqldiff --dsn ~/dbinfo.json --table1 bak_users --table2 users

Components:
- normalize: canonical string form of typed column values
- engine: single-pass positional merge-diff of two ordered row streams
- source: database row sources (MySQL, PostgreSQL, SQL Server)
- report: console / JSON / CSV rendering of diff events
- runner: one complete diff run
- cli: command-line entry point

Usage:
    from sqldiff.engine import diff
    result, events = diff(left_rows, right_rows, columns, ignored_columns={"modified"})
"""

from .engine import MergeDiff, diff
from .normalize import normalize
from .types import (
    AUDIT_COLUMNS,
    Changed,
    ColumnDescriptor,
    DiffOptions,
    DiffResult,
    LeftOnly,
    RightOnly,
    ScanType,
    Unchanged,
)

__version__ = "1.0.0"
__all__ = [
    "AUDIT_COLUMNS",
    "Changed",
    "ColumnDescriptor",
    "DiffOptions",
    "DiffResult",
    "LeftOnly",
    "MergeDiff",
    "RightOnly",
    "ScanType",
    "Unchanged",
    "diff",
    "normalize",
]
