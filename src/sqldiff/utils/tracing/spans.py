"""
Span helpers for diff runs and their queries.
"""

import functools
from contextlib import contextmanager

from opentelemetry import trace

from .tracer import get_tracer


@contextmanager
def trace_operation(
    operation_name: str,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **attributes
):
    """
    Run the block inside a span.

    Attributes are stringified. An exception escaping the block is
    recorded on the span, which is marked as an error, and re-raised.

    Example:
        >>> with trace_operation("sqldiff.run", left="bak_users") as span:
        ...     result = run()
        ...     span.set_attribute("sqldiff.matched", result.matched)
    """
    with get_tracer().start_as_current_span(operation_name, kind=kind) as span:
        for key, value in attributes.items():
            span.set_attribute(key, str(value))

        try:
            yield span
        except Exception as e:
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            span.set_attribute("error.type", type(e).__name__)
            span.record_exception(e)
            raise


def trace_select(sql: str, table: str, db_system: str):
    """
    Client span around a SELECT sent to the database.

    Example:
        >>> with trace_select(sql, "users", "mysql"):
        ...     cursor.execute(sql)
    """
    return trace_operation(
        "db.select",
        kind=trace.SpanKind.CLIENT,
        **{
            "db.system": db_system,
            "db.operation": "SELECT",
            "db.sql.table": table,
            "db.statement": sql,
        }
    )


def trace_function(operation_name: str | None = None, **default_attributes):
    """Decorator running each call of the function in its own span."""
    def decorator(func):
        name = operation_name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with trace_operation(name, **default_attributes):
                return func(*args, **kwargs)

        return wrapper
    return decorator


def add_span_attributes(**attributes):
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, str(value))


def add_span_event(name: str, **attributes):
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes={k: str(v) for k, v in attributes.items()})
