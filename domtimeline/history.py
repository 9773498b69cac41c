"""
Undo/redo history for an observed tree.

The timeline is three stacks:
- past: committed entries, most recent last; undo pops from here
- future: undone entries awaiting redo, most recent last
- lost_future: raw records cancelled because they happened while a future
  existed (kept for audit only)

While `future` is non-empty the tree is frozen: any new change is reverted
as soon as it is flushed, so the history never forks.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from rich.console import Console

from .applier import apply
from .capture import CaptureCoordinator
from .config import TimelineOptions
from .hooks import TimelineHooks
from .observer import MutationWatcher
from .records import Direction, HistoryEntry, RawEvent
from .tree import Node


class DomHistory:
    """
    Past/future stacks plus the off-records guard.

    The guard is a counter: the history increments it around its own tree
    writes, and any flush reaching the capture coordinator while it is
    positive is ignored.
    """

    def __init__(
        self,
        watcher: MutationWatcher,
        *,
        hooks: TimelineHooks | None = None,
        max_past: int | None = None,
    ):
        self.watcher = watcher
        self.hooks = hooks or TimelineHooks()
        self.max_past = max_past

        self.past: list[HistoryEntry] = []
        self.future: list[HistoryEntry] = []
        self.lost_future: list[RawEvent] = []

        self._off_records = 0
        self.capture = CaptureCoordinator(self)
        if watcher.callback is None:
            watcher.callback = self.capture.on_unclaimed_records

    @classmethod
    def observe(
        cls,
        root: Node,
        options: TimelineOptions | None = None,
        *,
        console: Console | None = None,
    ) -> "DomHistory":
        """Start recording every change below `root`."""
        options = options or TimelineOptions()
        watcher = MutationWatcher(root).observe()
        hooks = TimelineHooks(console, log_records=options.log_records)
        return cls(watcher, hooks=hooks, max_past=options.max_past)

    # -------------------------------------------------------------------------
    # Guard
    # -------------------------------------------------------------------------

    @property
    def is_off_records(self) -> bool:
        return self._off_records > 0

    @contextmanager
    def off_records(self) -> Iterator[None]:
        """
        Mutate the tree without recording it.

        On every exit path the guard is released and whatever the watcher
        accumulated meanwhile is drained and dropped.
        """
        self._off_records += 1
        try:
            yield
        finally:
            self._off_records -= 1
            self.watcher.drain_pending()

    # -------------------------------------------------------------------------
    # Stacks
    # -------------------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def commit(self, entries: list[HistoryEntry]) -> None:
        """Append entries to the past, evicting the oldest beyond max_past."""
        self.past.extend(entries)
        if self.max_past is not None and len(self.past) > self.max_past:
            del self.past[: len(self.past) - self.max_past]

    def undo(self) -> HistoryEntry | None:
        """
        Undo the most recent past entry and move it to the future.

        Pending changes are flushed first so they are not lost or mistaken
        for the effect of this undo. No-op (returns None) when past is empty.
        """
        self.capture.flush_unclaimed()

        if not self.past:
            return None
        entry = self.past.pop()

        with self.off_records():
            self.future.append(entry)
            apply(entry.event, Direction.BACKWARD)
        return entry

    def redo(self) -> HistoryEntry | None:
        """Redo the most recent future entry and move it back to the past."""
        self.capture.flush_unclaimed()

        if not self.future:
            return None
        entry = self.future.pop()

        with self.off_records():
            self.past.append(entry)
            apply(entry.event, Direction.FORWARD)
        return entry

    def clear(self) -> None:
        """Forget all history (the tree is left as it is)."""
        self.capture.flush_unclaimed()
        self.past.clear()
        self.future.clear()
        self.lost_future.clear()

    def __repr__(self) -> str:
        return (
            f"<DomHistory past={len(self.past)} future={len(self.future)} "
            f"lost_future={len(self.lost_future)}>"
        )
