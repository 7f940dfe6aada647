"""
Prometheus metrics for sqldiff runs

Usage:
    from sqldiff.utils.metrics import DiffMetrics

    metrics = DiffMetrics()
    metrics.record_run(result, duration=1.2, status="mismatch")
    metrics.write_textfile("/var/lib/node_exporter/sqldiff.prom")
"""

from .diff import DiffMetrics
from .registry import get_or_create_metric

__all__ = [
    "DiffMetrics",
    "get_or_create_metric",
]
