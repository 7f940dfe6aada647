"""
Console listing of differences.

Output shape::

    --- bak_users
    +++ users
        id=(   2,   2),                 name=(b,c)
    -@@ id=7
    +@@ id=9
          3 rows are found
"""

from typing import TextIO

from ..types import Changed, DiffEvent, DiffResult, LeftOnly, RightOnly
from .formatters import Renderer


class ConsoleRenderer(Renderer):
    """
    Text renderer for terminals and pipes.

    Args:
        stream: Where to write (usually stdout)
        print_header: Print ``---``/``+++`` table names before the first difference
    """

    def __init__(self, stream: TextIO, print_header: bool = False):
        super().__init__(stream)
        self.print_header = print_header
        self._header_pending = print_header

    def _header(self) -> None:
        if self._header_pending:
            self.stream.write(f"--- {self.left}\n")
            self.stream.write(f"+++ {self.right}\n")
            self._header_pending = False

    def event(self, event: DiffEvent) -> None:
        if isinstance(event, Changed):
            self._header()
            self.stream.write(
                f"    id=({event.left_key!s:>4},{event.right_key!s:>4}), "
                f"{event.column:>20}=({event.left_value},{event.right_value})\n"
            )
        elif isinstance(event, LeftOnly):
            self._header()
            self.stream.write(f"-@@ id={event.key}\n")
        elif isinstance(event, RightOnly):
            self._header()
            self.stream.write(f"+@@ id={event.key}\n")

    def finish(self, result: DiffResult) -> None:
        if result.mismatched_rows > 0:
            self.stream.write(f"      {result.mismatched_rows} rows are found\n")
        self.stream.flush()
