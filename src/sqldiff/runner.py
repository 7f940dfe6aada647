"""
One complete diff run: connect, stream both tables through the merge-diff
engine, hand every event to a renderer and close everything afterwards.
"""

import logging
import sys
import time
from collections.abc import Callable
from typing import Any

from opentelemetry import trace

from sqldiff.utils.logging import ContextLogger
from sqldiff.utils.metrics import DiffMetrics
from sqldiff.utils.tracing import add_span_attributes, add_span_event, trace_operation

from .config import parse_dsn
from .engine import MergeDiff
from .errors import QueryError
from .report import ConsoleRenderer, Renderer
from .source import DatabaseType, RowSource, TableSpec, connect, parse_projection
from .types import ColumnDescriptor, DiffOptions, DiffResult

logger = logging.getLogger(__name__)


def check_columns(left: list[ColumnDescriptor], right: list[ColumnDescriptor]) -> None:
    """
    Both sides must project the same column names in the same order.

    Raises:
        QueryError: the projections differ
    """
    left_names = [col.name for col in left]
    right_names = [col.name for col in right]
    if left_names != right_names:
        raise QueryError(
            f"column mismatch: left has ({', '.join(left_names)}), "
            f"right has ({', '.join(right_names)})"
        )


def _close_connection(connection: Any) -> None:
    try:
        connection.close()
    except Exception as e:
        logger.warning(f"Error closing connection: {e}")


def diff_tables(
    dsn: str,
    left: str,
    right: str,
    driver: str = "mysql",
    column: str = "*",
    key: str = "id",
    exclude_audit: bool = False,
    renderer: Renderer | None = None,
    batch_size: int = 1000,
    metrics: DiffMetrics | None = None,
    connect_func: Callable[..., Any] = connect,
) -> DiffResult:
    """
    Compare two tables of one database.

    Each side gets its own connection so both result sets can stream at
    the same time. Sources and connections are closed on every exit path.

    Args:
        dsn: Validated ``user:password@tcp(host:port)/database``
        left: Left table, optionally followed by ``WHERE <condition>``
        right: Right table, optionally followed by ``WHERE <condition>``
        driver: ``mysql``, ``postgresql`` or ``sqlserver``
        column: Projection, ``*`` or comma-separated names
        key: Ordering / identity column
        exclude_audit: Skip created, modified, created_user, modified_user
        renderer: Event consumer (default: console listing on stdout)
        batch_size: Rows fetched per round trip
        metrics: Optional metrics recorder
        connect_func: Connection factory ``(db_type, settings) -> connection``

    Returns:
        DiffResult of the run

    Raises:
        SqlDiffError: any configuration, connection, query, scan or
            unsupported-type failure; no partial result is returned
    """
    db_type = DatabaseType.from_driver(driver)
    settings = parse_dsn(dsn)
    left_spec = TableSpec.parse(left)
    right_spec = TableSpec.parse(right)
    projection = parse_projection(column)
    renderer = renderer or ConsoleRenderer(sys.stdout)
    options = DiffOptions.for_audit_exclusion(exclude_audit, key_column=key)

    log = ContextLogger(__name__, left=str(left_spec), right=str(right_spec))
    started = time.monotonic()
    status = "error"
    result: DiffResult | None = None
    connections: list[Any] = []
    sources: list[RowSource] = []

    with trace_operation(
        "sqldiff.run",
        kind=trace.SpanKind.INTERNAL,
        left=left_spec,
        right=right_spec,
        driver=db_type.value,
    ):
        try:
            log.info("Starting diff", driver=db_type.value, database=settings.database)

            for side, spec in (("left", left_spec), ("right", right_spec)):
                connection = connect_func(db_type, settings)
                connections.append(connection)
                source = RowSource(
                    connection,
                    db_type,
                    spec,
                    columns=projection,
                    key=key,
                    batch_size=batch_size,
                    side=side,
                )
                sources.append(source)
                source.open()
                log.bind(side=side).debug("Source opened", sql=source.sql, columns=len(source.columns))

            left_source, right_source = sources
            check_columns(left_source.columns, right_source.columns)

            merge = MergeDiff(left_source, right_source, left_source.columns, options)
            renderer.begin(str(left_spec), str(right_spec), left_source.columns)
            for event in merge:
                renderer.event(event)
            result = merge.result
            renderer.finish(result)

            status = "match" if result.matched else "mismatch"
            if result.misaligned_pairs:
                add_span_event("sqldiff.misaligned", pairs=result.misaligned_pairs)
            add_span_attributes(**{f"sqldiff.{k}": v for k, v in result.to_dict().items()})
            log.info(
                "Diff complete",
                status=status,
                compared=result.rows_compared,
                changed=result.changed_rows,
                left_only=result.left_only_rows,
                right_only=result.right_only_rows,
            )
            return result
        finally:
            for source in reversed(sources):
                source.close()
            for connection in reversed(connections):
                _close_connection(connection)
            if metrics is not None:
                metrics.record_run(result, time.monotonic() - started, status)
