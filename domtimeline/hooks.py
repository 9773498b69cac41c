"""
Observability hooks: record logging and conditional breakpoints.

Hooks never alter timeline state. Exceptions raised by a user-supplied
breakpoint propagate to whoever triggered the flush.
"""

from __future__ import annotations

from typing import Callable, Sequence

from rich.console import Console
from rich.markup import escape

from .records import HistoryEntry, RawEvent, format_record


class TimelineHooks:
    """
    Default hooks printing to a rich console.

    Key behaviors:
    - consider_logging_records() prints one group per batch: a bold
      "<label> [<count>]" header, one line per record, then the cause
    - consider_breakpoint() calls the user's predicate for every entry about
      to be committed, in the context of the change
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        log_records: bool = True,
        breakpoint: Callable[[HistoryEntry], None] | None = None,
    ):
        self.console = console or Console(stderr=True)
        self.log_records = log_records
        self.breakpoint = breakpoint

    def consider_logging_records(
        self,
        label: str,
        records: Sequence[RawEvent | HistoryEntry],
        cause: str | None,
    ) -> None:
        if not self.log_records:
            return
        self.console.print(f"[bold]{escape(label)}[/bold] \\[{len(records)}]")
        for record in records:
            self.console.print(f"  {escape(format_record(record))}", highlight=False)
        if cause:
            self.console.print(escape(cause.rstrip()), style="dim", highlight=False)

    def consider_breakpoint(self, entry: HistoryEntry) -> None:
        if self.breakpoint is not None:
            self.breakpoint(entry)

    def warn(self, message: str) -> None:
        if self.log_records:
            self.console.print(f"[yellow]{escape(message)}[/yellow]")
