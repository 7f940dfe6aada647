"""
Rendering of diff events.

Renderers consume events as the engine yields them and own every output
decision: the console renderer reproduces the classic text listing, the
JSON and CSV renderers write machine-readable reports.
"""

from .console import ConsoleRenderer
from .formatters import CSVRenderer, JSONRenderer, Renderer, create_renderer

__all__ = [
    "Renderer",
    "ConsoleRenderer",
    "JSONRenderer",
    "CSVRenderer",
    "create_renderer",
]
