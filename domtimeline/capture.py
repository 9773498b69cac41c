"""
Capture coordinator: turns watcher flushes into timeline entries.

Every non-empty batch ends in exactly one of three ways:
- ignored, when it is a byproduct of the history's own (off-records) writes
- cancelled, when a future exists: reverted at once and moved to lost_future
- committed, otherwise: reconstructed, attributed and pushed onto the past
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from .applier import apply
from .reconstruct import reconstruct
from .records import Attribution, Direction, HistoryEntry, RawEvent

if TYPE_CHECKING:
    from .history import DomHistory


LOST_FUTURE_WARNING = (
    "DOM mutations were cancelled because the timeline is reviewing the past "
    "and a future already exists (see lost_future)"
)


class CaptureCoordinator:
    """Routes batches of raw records into a DomHistory."""

    def __init__(self, history: "DomHistory"):
        self.history = history

    def flush_unclaimed(self) -> int:
        """Drain the watcher and record whatever was pending as unclaimed."""
        return self.on_flush(self.history.watcher.drain_pending(), Attribution.unclaimed())

    def flush_claimed(self, label: str, cause: str | None = None) -> int:
        """Drain the watcher and record the batch under `label`."""
        return self.on_flush(self.history.watcher.drain_pending(), Attribution(label, cause))

    def on_unclaimed_records(self, records: list[RawEvent]) -> None:
        """Watcher delivery callback."""
        self.on_flush(records, Attribution.unclaimed())

    def on_flush(self, records: Sequence[RawEvent], attribution: Attribution) -> int:
        """
        Process one batch of raw records.

        Args:
            records: Raw records in chronological order
            attribution: Label and cause for the whole batch

        Returns:
            Number of entries committed to the past
        """
        if not records:
            return 0

        history = self.history
        if history.is_off_records:
            return 0

        if history.future:
            self._cancel(records, attribution)
            return 0

        entries = [HistoryEntry(event, attribution) for event in reconstruct(records)]
        for entry in entries:
            history.hooks.consider_breakpoint(entry)
        history.commit(entries)

        history.hooks.consider_logging_records(attribution.label, entries, attribution.cause)
        return len(entries)

    def _cancel(self, records: Sequence[RawEvent], attribution: Attribution) -> None:
        history = self.history
        if not history.lost_future:
            history.hooks.warn(LOST_FUTURE_WARNING)
        history.lost_future.extend(records)

        with history.off_records():
            for record in reversed(records):
                apply(record, Direction.BACKWARD)

        history.hooks.consider_logging_records(attribution.label, records, attribution.cause)
