"""
Row sources: ordered, streamed rows of a table plus their column descriptors.

Components:
- dialects: driver selection, identifier quoting, column type classification
- query: table/filter parsing and SELECT construction
- connection: lazy driver imports and streaming cursors
- rows: RowSource, the iterator the merge-diff engine consumes
"""

from .connection import connect, open_cursor
from .dialects import DatabaseType
from .query import TableSpec, build_select, parse_projection
from .rows import RowSource

__all__ = [
    "DatabaseType",
    "RowSource",
    "TableSpec",
    "build_select",
    "connect",
    "open_cursor",
    "parse_projection",
]
