"""
SELECT construction for row sources.

A table argument is either a plain (schema-qualified) table name or a
table name followed by a WHERE clause, e.g. ``"orders WHERE shop_id = 3"``.
Identifiers are validated and quoted for the dialect; the WHERE text is
passed through as written by the operator.
"""

import re
from dataclasses import dataclass

from ..errors import QueryError
from .dialects import DatabaseType

TABLE_SPEC = re.compile(
    r"^\s*(?P<table>[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)?)"
    r"(?:\s+where\s+(?P<where>.+?))?\s*$",
    re.IGNORECASE | re.DOTALL,
)

ALL_COLUMNS = "*"


@dataclass(frozen=True)
class TableSpec:
    """Table name plus optional row filter."""

    table: str
    where: str | None = None

    @classmethod
    def parse(cls, spec: str) -> "TableSpec":
        """
        Split ``"name [WHERE condition]"``.

        Raises:
            QueryError: spec is empty or the name is not a valid identifier
        """
        match = TABLE_SPEC.match(spec or "")
        if not match:
            raise QueryError(f"invalid table: {spec!r}")
        return cls(table=match.group("table"), where=match.group("where"))

    def __str__(self) -> str:
        if self.where:
            return f"{self.table} WHERE {self.where}"
        return self.table


def parse_projection(column: str | None) -> list[str] | None:
    """
    Parse a ``--column`` value.

    Returns:
        None for all columns (``*`` or empty), else the column names
    """
    if column is None or column.strip() in ("", ALL_COLUMNS):
        return None
    names = [name.strip() for name in column.split(",")]
    if any(not name for name in names):
        raise QueryError(f"invalid column list: {column!r}")
    return names


def build_select(
    db_type: DatabaseType,
    table: TableSpec,
    columns: list[str] | None = None,
    key: str = "id",
) -> str:
    """
    Build ``SELECT <columns> FROM <table> [WHERE ...] ORDER BY <key>``.

    Raises:
        QueryError: a table, column or key identifier is invalid
    """
    try:
        column_list = (
            ALL_COLUMNS if columns is None
            else ", ".join(db_type.quote_identifier(col) for col in columns)
        )
        sql = f"SELECT {column_list} FROM {db_type.quote_identifier(table.table)}"
        if table.where:
            sql += f" WHERE {table.where}"
        sql += f" ORDER BY {db_type.quote_identifier(key)}"
    except ValueError as e:
        raise QueryError(str(e)) from e
    return sql
