"""
Idempotent metric registration.
"""

from typing import Callable, TypeVar

from prometheus_client import REGISTRY, CollectorRegistry

T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Create a metric, or return the one already registered under that name.

    Lets metrics on the default registry survive a second ``DiffMetrics()``
    in the same process (pytest, library callers running several diffs).

    Example:
        RUNS = get_or_create_metric(
            lambda: Counter("sqldiff_runs", "Runs", ["status"]),
            "sqldiff_runs",
        )
    """
    try:
        return metric_factory()
    except ValueError:
        existing = registry._names_to_collectors.get(metric_name)
        if existing is not None:
            return existing
        raise
