"""
Database dialects: identifier quoting and column type classification.

Each supported driver describes result columns differently in
``cursor.description``; this module maps those descriptions onto the
closed ``ScanType`` set the normalizer understands.
"""

import datetime
import decimal
import re
import uuid
from enum import Enum
from typing import Any

from ..errors import ConfigError
from ..types import ColumnDescriptor, ScanType

# Strict ASCII-only pattern for SQL identifiers, optionally schema-qualified
VALID_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)?$")

# MySQLdb.constants.FIELD_TYPE codes
MYSQL_FIELD_TYPES = {
    0: "DECIMAL", 1: "TINY", 2: "SHORT", 3: "LONG", 4: "FLOAT", 5: "DOUBLE",
    6: "NULL", 7: "TIMESTAMP", 8: "LONGLONG", 9: "INT24", 10: "DATE", 11: "TIME",
    12: "DATETIME", 13: "YEAR", 14: "NEWDATE", 15: "VARCHAR", 16: "BIT",
    245: "JSON", 246: "NEWDECIMAL", 247: "ENUM", 248: "SET", 249: "TINY_BLOB",
    250: "MEDIUM_BLOB", 251: "LONG_BLOB", 252: "BLOB", 253: "VAR_STRING",
    254: "STRING", 255: "GEOMETRY",
}

MYSQL_TEXT = {
    "DECIMAL", "NEWDECIMAL", "NULL", "VARCHAR", "BIT", "JSON", "ENUM", "SET",
    "TINY_BLOB", "MEDIUM_BLOB", "LONG_BLOB", "BLOB", "VAR_STRING", "STRING",
    "GEOMETRY", "TIME",
}
MYSQL_TIME = {"DATE", "DATETIME", "TIMESTAMP", "NEWDATE"}
# MySQLdb.constants.FLAG.UNSIGNED
MYSQL_UNSIGNED_FLAG = 32
# name -> (scan type when NOT NULL, scan type when nullable)
MYSQL_SIGNED = {
    "TINY": (ScanType.INT8, ScanType.NULL_INT32),
    "SHORT": (ScanType.INT32, ScanType.NULL_INT32),
    "YEAR": (ScanType.INT32, ScanType.NULL_INT32),
    "INT24": (ScanType.INT32, ScanType.NULL_INT32),
    "LONG": (ScanType.INT32, ScanType.NULL_INT32),
    "LONGLONG": (ScanType.INT64, ScanType.NULL_INT64),
    "FLOAT": (ScanType.FLOAT32, ScanType.FLOAT32),
    "DOUBLE": (ScanType.FLOAT64, ScanType.FLOAT64),
}
MYSQL_UNSIGNED = {
    **MYSQL_SIGNED,
    "TINY": (ScanType.UINT32, ScanType.NULL_INT32),
    "SHORT": (ScanType.UINT32, ScanType.NULL_INT32),
    "YEAR": (ScanType.UINT32, ScanType.NULL_INT32),
    "INT24": (ScanType.UINT32, ScanType.NULL_INT32),
    "LONG": (ScanType.UINT32, ScanType.NULL_INT64),
    "LONGLONG": (ScanType.UINT64, ScanType.NULL_UINT64),
}
# Used when the cursor does not expose column flags: wide enough for
# either signedness, except LONGLONG which stays signed
MYSQL_ANY_SIGN = {
    **MYSQL_SIGNED,
    "TINY": (ScanType.INT64, ScanType.NULL_INT32),
    "SHORT": (ScanType.INT64, ScanType.NULL_INT32),
    "YEAR": (ScanType.INT64, ScanType.NULL_INT32),
    "INT24": (ScanType.INT64, ScanType.NULL_INT32),
    "LONG": (ScanType.INT64, ScanType.NULL_INT64),
}

# PostgreSQL type OIDs (pg_type.oid) as reported by psycopg2
POSTGRES_OIDS = {
    16: ("bool", ScanType.RAW_BYTES),
    17: ("bytea", ScanType.RAW_BYTES),
    18: ("char", ScanType.RAW_BYTES),
    19: ("name", ScanType.RAW_BYTES),
    20: ("int8", ScanType.NULL_INT64),
    21: ("int2", ScanType.NULL_INT32),
    23: ("int4", ScanType.NULL_INT32),
    25: ("text", ScanType.RAW_BYTES),
    26: ("oid", ScanType.UINT32),
    28: ("xid", ScanType.UINT32),
    114: ("json", ScanType.RAW_BYTES),
    142: ("xml", ScanType.RAW_BYTES),
    650: ("cidr", ScanType.RAW_BYTES),
    700: ("float4", ScanType.FLOAT32),
    701: ("float8", ScanType.FLOAT64),
    790: ("money", ScanType.RAW_BYTES),
    869: ("inet", ScanType.RAW_BYTES),
    1042: ("bpchar", ScanType.RAW_BYTES),
    1043: ("varchar", ScanType.RAW_BYTES),
    1082: ("date", ScanType.NULL_TIME),
    1083: ("time", ScanType.NULL_TIME),
    1114: ("timestamp", ScanType.NULL_TIME),
    1184: ("timestamptz", ScanType.NULL_TIME),
    1186: ("interval", ScanType.NULL_TIME),
    1266: ("timetz", ScanType.NULL_TIME),
    1700: ("numeric", ScanType.RAW_BYTES),
    2950: ("uuid", ScanType.RAW_BYTES),
    3802: ("jsonb", ScanType.RAW_BYTES),
}

PYODBC_TEXT_TYPES = (str, bytes, bytearray, decimal.Decimal, uuid.UUID)
PYODBC_TIME_TYPES = (datetime.datetime, datetime.date, datetime.time)


class DatabaseType(str, Enum):
    """
    Supported database drivers.

    Inherits from str so the value doubles as the ``--driver`` choice.
    """

    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    SQLSERVER = "sqlserver"

    @classmethod
    def from_driver(cls, driver: str) -> "DatabaseType":
        """
        Resolve a ``--driver`` value (case-insensitive, ``postgres`` accepted).

        Raises:
            ConfigError: Unknown driver name
        """
        name = (driver or "").strip().lower()
        if name == "postgres":
            name = "postgresql"
        try:
            return cls(name)
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ConfigError(f"unknown driver {driver!r} (expected one of: {choices})") from None

    def quote_identifier(self, identifier: str) -> str:
        """
        Validate and quote a (optionally schema-qualified) identifier.

        Raises:
            ValueError: identifier contains anything but ASCII letters,
                digits and underscores
        """
        if not identifier or not VALID_IDENTIFIER.match(identifier):
            raise ValueError(f"Invalid identifier format: {identifier!r}")

        if self == DatabaseType.MYSQL:
            template = "`{}`"
        elif self == DatabaseType.POSTGRESQL:
            template = '"{}"'
        else:
            template = "[{}]"
        return ".".join(template.format(part) for part in identifier.split("."))

    def describe(self, description: Any, flags: Any = None) -> list[ColumnDescriptor]:
        """
        Build column descriptors from a DB-API ``cursor.description``.

        Args:
            description: ``cursor.description`` of the executed query
            flags: Per-column driver flags (see ``column_flags``), or None
                when the cursor does not expose them
        """
        if flags is not None and len(flags) != len(description):
            flags = None
        return [
            self._classify(entry, flags[i] if flags is not None else None)
            for i, entry in enumerate(description)
        ]

    def column_flags(self, cursor: Any) -> list[int] | None:
        """
        Column flags of the cursor's current result, MySQL only.

        ``cursor.description`` does not carry signedness; MySQLdb keeps
        it in the flags of the underlying result object.
        """
        if self != DatabaseType.MYSQL:
            return None
        result = getattr(cursor, "_result", None)
        if result is None or not hasattr(result, "field_flags"):
            return None
        return list(result.field_flags())

    def _classify(self, entry: Any, flags: int | None = None) -> ColumnDescriptor:
        name, type_code = entry[0], entry[1]
        null_ok = entry[6] if len(entry) > 6 else None
        internal_size = entry[3] if len(entry) > 3 else None
        precision = entry[4] if len(entry) > 4 else None

        if self == DatabaseType.MYSQL:
            scan_type, type_name = _classify_mysql(type_code, null_ok, flags)
        elif self == DatabaseType.POSTGRESQL:
            scan_type, type_name = _classify_postgres(type_code, null_ok)
        else:
            scan_type, type_name = _classify_pyodbc(type_code, null_ok, precision or internal_size)
        return ColumnDescriptor(name=name, scan_type=scan_type, type_name=type_name)


def _classify_mysql(type_code: Any, null_ok: Any, flags: int | None = None) -> tuple[ScanType, str]:
    type_name = MYSQL_FIELD_TYPES.get(type_code)
    if type_name is None:
        return ScanType.UNSUPPORTED, f"mysql field type {type_code}"
    if type_name in MYSQL_TEXT:
        return ScanType.RAW_BYTES, type_name
    if type_name in MYSQL_TIME:
        return ScanType.NULL_TIME, type_name
    if flags is None:
        numeric = MYSQL_ANY_SIGN
    elif flags & MYSQL_UNSIGNED_FLAG:
        numeric = MYSQL_UNSIGNED
    else:
        numeric = MYSQL_SIGNED
    not_null, nullable = numeric[type_name]
    if numeric is MYSQL_UNSIGNED:
        type_name = f"{type_name} UNSIGNED"
    # MySQLdb reports null_ok from the column flags; treat unknown as nullable
    return (not_null if null_ok is False else nullable), type_name


def _classify_postgres(type_code: Any, null_ok: Any) -> tuple[ScanType, str]:
    known = POSTGRES_OIDS.get(type_code)
    if known is None:
        return ScanType.UNSUPPORTED, f"postgresql oid {type_code}"
    type_name, scan_type = known
    if null_ok is False:
        if scan_type is ScanType.NULL_INT32:
            scan_type = ScanType.INT32
        elif scan_type is ScanType.NULL_INT64:
            scan_type = ScanType.INT64
    return scan_type, type_name


def _classify_pyodbc(type_code: Any, null_ok: Any, precision: Any) -> tuple[ScanType, str]:
    type_name = getattr(type_code, "__name__", str(type_code))

    # bool before int: bool is an int subclass
    if type_code is bool:
        return (ScanType.INT8 if null_ok is False else ScanType.NULL_INT32), "bit"
    if type_code is int:
        wide = precision is None or precision > 10
        if null_ok is False:
            return (ScanType.INT64 if wide else ScanType.INT32), type_name
        return (ScanType.NULL_INT64 if wide else ScanType.NULL_INT32), type_name
    if type_code is float:
        if precision is not None and precision <= 24:
            return ScanType.FLOAT32, "real"
        return ScanType.FLOAT64, type_name
    if isinstance(type_code, type) and issubclass(type_code, PYODBC_TIME_TYPES):
        return ScanType.NULL_TIME, type_name
    if isinstance(type_code, type) and issubclass(type_code, PYODBC_TEXT_TYPES):
        return ScanType.RAW_BYTES, type_name
    return ScanType.UNSUPPORTED, type_name
