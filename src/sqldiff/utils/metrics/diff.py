"""
Metrics for table diff runs.

Tracks run outcomes, rows compared, differences by kind and run
duration. Batch runs export them with the node-exporter textfile
collector format since the process exits before any scrape.
"""

import logging
from typing import Any, Callable

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    write_to_textfile,
)

from .registry import get_or_create_metric

logger = logging.getLogger(__name__)


class DiffMetrics:
    """
    Metrics for sqldiff runs

    Pass a private ``CollectorRegistry`` to keep runs (and tests)
    isolated from the process-wide default registry.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry if registry is not None else REGISTRY

        self.runs_total = self._metric(
            "sqldiff_runs_total",
            lambda: Counter(
                "sqldiff_runs_total",
                "Total number of diff runs by outcome",
                ["status"],
                registry=self.registry,
            ),
        )

        self.rows_compared_total = self._metric(
            "sqldiff_rows_compared_total",
            lambda: Counter(
                "sqldiff_rows_compared_total",
                "Total number of row pairs compared",
                registry=self.registry,
            ),
        )

        self.row_differences_total = self._metric(
            "sqldiff_row_differences_total",
            lambda: Counter(
                "sqldiff_row_differences_total",
                "Total number of differing rows by kind",
                ["kind"],
                registry=self.registry,
            ),
        )

        self.duration_seconds = self._metric(
            "sqldiff_duration_seconds",
            lambda: Histogram(
                "sqldiff_duration_seconds",
                "Duration of diff runs in seconds",
                buckets=(0.1, 0.5, 1, 5, 10, 30, 60, 300, 900, 3600),
                registry=self.registry,
            ),
        )

        self.last_run_timestamp = self._metric(
            "sqldiff_last_run_timestamp",
            lambda: Gauge(
                "sqldiff_last_run_timestamp",
                "Unix timestamp of the last diff run",
                registry=self.registry,
            ),
        )

    def _metric(self, name: str, factory: Callable[[], Any]) -> Any:
        return get_or_create_metric(factory, name, registry=self.registry)

    def record_run(self, result: Any, duration: float, status: str) -> None:
        """
        Record a finished run

        Args:
            result: DiffResult of the run, or None when the run failed
            duration: Duration in seconds
            status: ``match``, ``mismatch`` or ``error``
        """
        self.runs_total.labels(status=status).inc()
        self.duration_seconds.observe(duration)
        self.last_run_timestamp.set_to_current_time()

        if result is None:
            return

        self.rows_compared_total.inc(result.rows_compared)
        for kind, count in (
            ("changed", result.changed_rows),
            ("left_only", result.left_only_rows),
            ("right_only", result.right_only_rows),
        ):
            if count:
                self.row_differences_total.labels(kind=kind).inc(count)

        logger.debug(
            f"Recorded run: status={status}, compared={result.rows_compared}, "
            f"duration={duration:.3f}s"
        )

    def write_textfile(self, path: str) -> None:
        """Write the registry in Prometheus text format to ``path``."""
        write_to_textfile(path, self.registry)
        logger.info(f"Metrics written to {path}")
