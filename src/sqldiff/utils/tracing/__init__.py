"""
Distributed tracing using OpenTelemetry.

Instruments diff runs and the SELECT queries feeding them. Tracing is a
no-op unless an exporter is configured (``OTLP_ENDPOINT`` or
``TRACE_CONSOLE=true``).
"""

from .spans import (
    add_span_attributes,
    add_span_event,
    trace_function,
    trace_operation,
    trace_select,
)
from .tracer import get_tracer, initialize_tracing, shutdown_tracing

__all__ = [
    "initialize_tracing",
    "get_tracer",
    "shutdown_tracing",
    "trace_operation",
    "trace_select",
    "trace_function",
    "add_span_attributes",
    "add_span_event",
]
