"""
Report renderers and the renderer factory.

JSON and CSV reports are meant for files (``--output``) and downstream
tooling; values are the normalized strings the comparison used.
"""

import csv
import json
from datetime import UTC, datetime
from typing import Any, TextIO

from ..types import Changed, ColumnDescriptor, DiffEvent, DiffResult, LeftOnly, RightOnly, Unchanged

FORMATS = ("console", "json", "csv")


class Renderer:
    """
    Base renderer: ``begin`` once, ``event`` per diff event, ``finish`` once.
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.left = ""
        self.right = ""
        self.columns: list[ColumnDescriptor] = []

    def begin(self, left: str, right: str, columns: list[ColumnDescriptor]) -> None:
        self.left = left
        self.right = right
        self.columns = list(columns)

    def event(self, event: DiffEvent) -> None:
        raise NotImplementedError

    def finish(self, result: DiffResult) -> None:
        raise NotImplementedError


def event_to_dict(event: DiffEvent) -> dict[str, Any]:
    """Flatten an event into JSON-friendly primitives."""
    if isinstance(event, Changed):
        return {
            "kind": event.kind,
            "left_key": event.left_key,
            "right_key": event.right_key,
            "column": event.column,
            "left_value": event.left_value,
            "right_value": event.right_value,
        }
    if isinstance(event, (LeftOnly, RightOnly)):
        return {"kind": event.kind, "key": event.key}
    if isinstance(event, Unchanged):
        return {"kind": event.kind, "left_key": event.left_key, "right_key": event.right_key}
    raise TypeError(f"not a diff event: {event!r}")


class JSONRenderer(Renderer):
    """
    Writes one JSON document once the run finishes.

    Events are buffered; only differences are kept unless the engine was
    asked to emit unchanged pairs.
    """

    def __init__(self, stream: TextIO, indent: int | None = 2):
        super().__init__(stream)
        self.indent = indent
        self.events: list[dict[str, Any]] = []

    def event(self, event: DiffEvent) -> None:
        self.events.append(event_to_dict(event))

    def finish(self, result: DiffResult) -> None:
        report = {
            "left": self.left,
            "right": self.right,
            "timestamp": datetime.now(UTC).isoformat(),
            "status": "MATCH" if result.matched else "MISMATCH",
            "columns": [col.to_dict() for col in self.columns],
            "summary": result.to_dict(),
            "events": self.events,
        }
        json.dump(report, self.stream, indent=self.indent, default=str)
        self.stream.write("\n")
        self.stream.flush()


class CSVRenderer(Renderer):
    """
    Streams one CSV line per event.

    Columns: kind, left_key, right_key, column, left_value, right_value.
    Left-only rows fill ``left_key`` only, right-only rows ``right_key`` only.
    """

    HEADER = ["kind", "left_key", "right_key", "column", "left_value", "right_value"]

    def __init__(self, stream: TextIO):
        super().__init__(stream)
        self.writer = csv.writer(stream)

    def begin(self, left: str, right: str, columns: list[ColumnDescriptor]) -> None:
        super().begin(left, right, columns)
        self.writer.writerow(self.HEADER)

    def event(self, event: DiffEvent) -> None:
        if isinstance(event, Changed):
            self.writer.writerow([
                event.kind, event.left_key, event.right_key,
                event.column, event.left_value, event.right_value,
            ])
        elif isinstance(event, LeftOnly):
            self.writer.writerow([event.kind, event.key, "", "", "", ""])
        elif isinstance(event, RightOnly):
            self.writer.writerow([event.kind, "", event.key, "", "", ""])
        elif isinstance(event, Unchanged):
            self.writer.writerow([event.kind, event.left_key, event.right_key, "", "", ""])

    def finish(self, result: DiffResult) -> None:
        self.stream.flush()


def create_renderer(fmt: str, stream: TextIO, print_header: bool = False) -> Renderer:
    """
    Build a renderer for ``--format``.

    Raises:
        ValueError: unknown format
    """
    if fmt == "console":
        from .console import ConsoleRenderer

        return ConsoleRenderer(stream, print_header=print_header)
    if fmt == "json":
        return JSONRenderer(stream)
    if fmt == "csv":
        return CSVRenderer(stream)
    raise ValueError(f"unknown format {fmt!r} (expected one of: {', '.join(FORMATS)})")
