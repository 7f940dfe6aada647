"""
Data model shared by the row sources, the merge-diff engine and the renderers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Audit/bookkeeping columns skipped by ``--modified``
AUDIT_COLUMNS = frozenset({"created", "modified", "created_user", "modified_user"})


class ScanType(str, Enum):
    """
    Closed set of column kinds the normalizer knows how to compare.

    Inherits from str so descriptors serialize cleanly in JSON reports.
    """

    RAW_BYTES = "raw_bytes"
    NULL_INT64 = "null_int64"
    NULL_INT32 = "null_int32"
    NULL_TIME = "null_time"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    INT8 = "int8"
    INT32 = "int32"
    UINT32 = "uint32"
    UINT64 = "uint64"
    NULL_UINT64 = "null_uint64"
    INT64 = "int64"
    UNSUPPORTED = "unsupported"

    @property
    def nullable(self) -> bool:
        return self in (
            ScanType.RAW_BYTES,
            ScanType.NULL_INT64,
            ScanType.NULL_INT32,
            ScanType.NULL_UINT64,
            ScanType.NULL_TIME,
        )


@dataclass(frozen=True)
class ColumnDescriptor:
    """Name and scan type of one projected column."""

    name: str
    scan_type: ScanType
    type_name: str = ""  # driver's own name for the type, for error messages

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "scan_type": self.scan_type.value,
            "type_name": self.type_name,
        }


@dataclass(frozen=True)
class DiffOptions:
    """
    Immutable configuration of one diff invocation.

    Attributes:
        ignored_columns: Column names excluded from comparison
        key_column: Identity column reported in events (falls back to column 0)
        emit_unchanged: Also yield ``Unchanged`` events for equal row pairs
    """

    ignored_columns: frozenset[str] = frozenset()
    key_column: str | None = "id"
    emit_unchanged: bool = False

    @classmethod
    def for_audit_exclusion(cls, exclude_audit: bool, **kwargs) -> "DiffOptions":
        """Options with the audit columns ignored when ``exclude_audit`` is set."""
        ignored = AUDIT_COLUMNS if exclude_audit else frozenset()
        return cls(ignored_columns=ignored, **kwargs)


@dataclass(frozen=True)
class Unchanged:
    """Row pair whose compared columns are all equal."""

    left_key: Any
    right_key: Any
    kind: str = field(default="unchanged", init=False)


@dataclass(frozen=True)
class Changed:
    """One differing column of a row pair."""

    left_key: Any
    right_key: Any
    column_index: int
    column: str
    left_value: str
    right_value: str
    kind: str = field(default="changed", init=False)


@dataclass(frozen=True)
class LeftOnly:
    """Row present only in the left stream."""

    key: Any
    row: tuple
    kind: str = field(default="left_only", init=False)


@dataclass(frozen=True)
class RightOnly:
    """Row present only in the right stream."""

    key: Any
    row: tuple
    kind: str = field(default="right_only", init=False)


DiffEvent = Unchanged | Changed | LeftOnly | RightOnly


@dataclass
class DiffResult:
    """
    Counters accumulated over one diff run.

    ``changed_rows`` counts row pairs with at least one differing column,
    once per pair. Rows present on one side only are counted separately;
    all three count towards ``mismatched_rows`` and therefore the verdict.
    """

    changed_rows: int = 0
    left_only_rows: int = 0
    right_only_rows: int = 0
    rows_compared: int = 0
    misaligned_pairs: int = 0

    @property
    def mismatched_rows(self) -> int:
        return self.changed_rows + self.left_only_rows + self.right_only_rows

    @property
    def matched(self) -> bool:
        return self.mismatched_rows == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "matched": self.matched,
            "changed_rows": self.changed_rows,
            "left_only_rows": self.left_only_rows,
            "right_only_rows": self.right_only_rows,
            "mismatched_rows": self.mismatched_rows,
            "rows_compared": self.rows_compared,
            "misaligned_pairs": self.misaligned_pairs,
        }
