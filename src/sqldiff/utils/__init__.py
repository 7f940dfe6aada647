"""
Shared utilities for sqldiff

Provides:
- logging: stderr logging setup with JSON / console formatters
- tracing: OpenTelemetry spans for runs and queries
- metrics: Prometheus metrics for diff runs
"""

__version__ = "1.0.0"
__all__ = ["logging", "tracing", "metrics"]
