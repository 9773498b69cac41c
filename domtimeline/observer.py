"""
Mutation watcher for an in-memory tree.

Mirrors the pull model of a DOM MutationObserver:
- Records are queued as the tree changes, filtered by root and options
- drain_pending() hands over everything queued since the last drain
- deliver() simulates the host's asynchronous delivery to a callback
"""

from __future__ import annotations

from typing import Callable

from .records import EventKind, RawEvent
from .tree import Node, TreeError


class MutationWatcher:
    """
    Deep observer of attributes, text and child lists below `root`.

    Key behaviors:
    - Records are kept in delivery (chronological) order
    - Only targets inside the observed subtree are recorded
    - Nothing is recorded until observe() is called or after disconnect()
    """

    def __init__(
        self,
        root: Node,
        callback: Callable[[list[RawEvent]], None] | None = None,
        *,
        attributes: bool = True,
        character_data: bool = True,
        child_list: bool = True,
        subtree: bool = True,
    ):
        """
        Args:
            root: Node to observe
            callback: Receives each non-empty batch passed through deliver()
            attributes: Record attribute changes
            character_data: Record text changes
            child_list: Record child insertions/removals
            subtree: Observe all descendants, not just `root` itself
        """
        self.root = root
        self.callback = callback
        self.subtree = subtree
        self.kinds: set[EventKind] = set()
        if attributes:
            self.kinds.add(EventKind.ATTRIBUTES)
        if character_data:
            self.kinds.add(EventKind.CHARACTER_DATA)
        if child_list:
            self.kinds.add(EventKind.CHILD_LIST)

        self._pending: list[RawEvent] = []
        self._observing = False

    @property
    def observing(self) -> bool:
        return self._observing

    def observe(self) -> "MutationWatcher":
        document = self.root._document
        if document is None:
            raise TreeError(f"{self.root.describe()} does not belong to a document")
        if not self._observing:
            document._watchers.append(self)
            self._observing = True
        return self

    def disconnect(self) -> None:
        """Stop observing and drop anything still pending."""
        document = self.root._document
        if self._observing and document is not None:
            document._watchers.remove(self)
        self._observing = False
        self._pending.clear()

    def drain_pending(self) -> list[RawEvent]:
        """Return all records queued since the last drain, oldest first."""
        records = self._pending
        self._pending = []
        return records

    def deliver(self) -> int:
        """
        Drain pending records and hand them to the callback.

        Returns the number of records delivered.
        """
        records = self.drain_pending()
        if records and self.callback is not None:
            self.callback(records)
        return len(records)

    def _enqueue(self, record: RawEvent) -> None:
        if record.kind not in self.kinds:
            return
        target = record.target
        if target is self.root or (self.subtree and self.root.contains(target)):
            self._pending.append(record)
