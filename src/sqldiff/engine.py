"""
Ordered merge-diff engine.

Walks two row streams that are already sorted by the same key, pairs rows
by position and classifies each step as unchanged, changed, left-only or
right-only. Only the current row pair is held in memory, so tables of any
size can be compared in one pass.

Rows are aligned by position, not looked up by key: a row inserted or
deleted in the middle of one side shifts every following pair. The engine
reports that misalignment (a warning and ``DiffResult.misaligned_pairs``)
but does not try to resynchronize.
"""

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from .errors import ScanError, UnsupportedTypeError
from .normalize import normalize
from .types import (
    Changed,
    ColumnDescriptor,
    DiffEvent,
    DiffOptions,
    DiffResult,
    LeftOnly,
    RightOnly,
    ScanType,
    Unchanged,
)

logger = logging.getLogger(__name__)

_EXHAUSTED = object()


class MergeDiff:
    """
    Single-pass positional diff of two ordered row streams.

    Iterating the instance drives the comparison and yields diff events in
    stream order; ``result`` holds the counters once iteration finishes.
    Each step reads one left row, then one right row; nothing is read ahead.

    Example:
        >>> merge = MergeDiff(left_rows, right_rows, columns, DiffOptions())
        >>> for event in merge:
        ...     render(event)
        >>> merge.result.matched
        True
    """

    def __init__(
        self,
        left_rows: Iterable[Sequence[Any]],
        right_rows: Iterable[Sequence[Any]],
        columns: Sequence[ColumnDescriptor],
        options: DiffOptions | None = None,
    ):
        """
        Args:
            left_rows: Rows of the left table, ordered by the identity key
            right_rows: Rows of the right table, in the same order
            columns: Descriptors shared by both streams, positionally aligned
            options: Ignored columns, key column and event verbosity

        Raises:
            UnsupportedTypeError: a compared column has a kind the
                normalizer cannot handle; raised before any row is read
        """
        self.columns = tuple(columns)
        self.options = options or DiffOptions()
        self.result = DiffResult()

        self._left = iter(left_rows)
        self._right = iter(right_rows)
        self._started = False
        self._compare_indexes = [
            i for i, col in enumerate(self.columns)
            if col.name not in self.options.ignored_columns
        ]
        self._key_index = self._resolve_key_index()
        self._check_scan_types()

    def _check_scan_types(self) -> None:
        for i in self._compare_indexes:
            col = self.columns[i]
            if not isinstance(col.scan_type, ScanType) or col.scan_type is ScanType.UNSUPPORTED:
                type_name = col.type_name or getattr(col.scan_type, "value", str(col.scan_type))
                raise UnsupportedTypeError(type_name, column=col.name)

    def _resolve_key_index(self) -> int:
        names = [col.name for col in self.columns]
        key = self.options.key_column
        if key and key in names:
            return names.index(key)
        return 0

    def __iter__(self) -> Iterator[DiffEvent]:
        if self._started:
            raise RuntimeError("MergeDiff streams can only be consumed once")
        self._started = True
        return self._run()

    def _run(self) -> Iterator[DiffEvent]:
        index = 0
        while True:
            left_row = next(self._left, _EXHAUSTED)
            if left_row is _EXHAUSTED:
                for right_row in self._right:
                    self._check_width(right_row, "right", index)
                    self.result.right_only_rows += 1
                    index += 1
                    yield RightOnly(key=self._key(right_row), row=tuple(right_row))
                break

            right_row = next(self._right, _EXHAUSTED)
            if right_row is _EXHAUSTED:
                self._check_width(left_row, "left", index)
                self.result.left_only_rows += 1
                index += 1
                yield LeftOnly(key=self._key(left_row), row=tuple(left_row))
                for left_row in self._left:
                    self._check_width(left_row, "left", index)
                    self.result.left_only_rows += 1
                    index += 1
                    yield LeftOnly(key=self._key(left_row), row=tuple(left_row))
                break

            yield from self._compare_pair(left_row, right_row, index)
            index += 1

        logger.debug(
            f"Merge-diff finished: {self.result.rows_compared} pairs compared, "
            f"{self.result.changed_rows} changed, {self.result.left_only_rows} left-only, "
            f"{self.result.right_only_rows} right-only"
        )

    def _compare_pair(
        self, left_row: Sequence[Any], right_row: Sequence[Any], index: int
    ) -> list[DiffEvent]:
        self._check_width(left_row, "left", index)
        self._check_width(right_row, "right", index)

        left_key = self._key(left_row)
        right_key = self._key(right_row)
        if left_key != right_key:
            if self.result.misaligned_pairs == 0:
                logger.warning(
                    f"Row streams are misaligned at pair {index}: "
                    f"left id={left_key}, right id={right_key}; "
                    f"following differences may be spurious"
                )
            self.result.misaligned_pairs += 1

        # Collect the whole pair first so a failure mid-row emits nothing for it
        changes: list[DiffEvent] = []
        for i in self._compare_indexes:
            col = self.columns[i]
            left_value = self._normalize(left_row[i], col, "left", index)
            right_value = self._normalize(right_row[i], col, "right", index)
            if left_value != right_value:
                changes.append(Changed(
                    left_key=left_key,
                    right_key=right_key,
                    column_index=i,
                    column=col.name,
                    left_value=left_value,
                    right_value=right_value,
                ))

        self.result.rows_compared += 1
        if changes:
            self.result.changed_rows += 1
        elif self.options.emit_unchanged:
            changes.append(Unchanged(left_key=left_key, right_key=right_key))
        return changes

    def _normalize(self, value: Any, col: ColumnDescriptor, side: str, index: int) -> str:
        try:
            return normalize(value, col.scan_type)
        except UnsupportedTypeError as e:
            raise UnsupportedTypeError(col.type_name or e.type_name, column=col.name) from e
        except ScanError as e:
            raise ScanError(
                f"{side} row {index} column {col.name!r}: {e}", side=side, row_index=index
            ) from e

    def _check_width(self, row: Sequence[Any], side: str, index: int) -> None:
        if len(row) != len(self.columns):
            raise ScanError(
                f"{side} row {index} has {len(row)} values, expected {len(self.columns)}",
                side=side,
                row_index=index,
            )

    def _key(self, row: Sequence[Any]) -> Any:
        return row[self._key_index]


def diff(
    left_rows: Iterable[Sequence[Any]],
    right_rows: Iterable[Sequence[Any]],
    columns: Sequence[ColumnDescriptor],
    ignored_columns: Iterable[str] = (),
    key_column: str | None = "id",
) -> tuple[DiffResult, list[DiffEvent]]:
    """
    Diff two ordered row streams and collect every event.

    Convenience wrapper over ``MergeDiff`` for callers that want the events
    as a list; use ``MergeDiff`` directly to stream large tables.

    Returns:
        Tuple of (DiffResult, events in stream order)
    """
    merge = MergeDiff(
        left_rows,
        right_rows,
        columns,
        DiffOptions(ignored_columns=frozenset(ignored_columns), key_column=key_column),
    )
    events = list(merge)
    return merge.result, events
