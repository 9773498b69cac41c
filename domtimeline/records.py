"""
Mutation records for the DOM timeline.

This module provides:
- Raw change records as delivered by the watcher (attribute, text, child list)
- ReconstructedEvent: a raw record plus the value it resulted in
- Attribution and HistoryEntry, the unit stored on the timeline
- format_record for human-readable display
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from .tree import Node


UNCLAIMED = "unclaimed"


class EventKind(str, Enum):
    """Types of primitive tree mutations."""

    ATTRIBUTES = "attributes"
    CHARACTER_DATA = "characterData"
    CHILD_LIST = "childList"


class Direction(str, Enum):
    """Direction in which a recorded change is applied."""

    FORWARD = "forward"  # redo
    BACKWARD = "backward"  # undo


@dataclass(frozen=True, eq=False)
class AttributeChange:
    """An attribute was set or removed on `target`."""

    target: "Node"
    attribute_name: str
    old_value: str | None  # None = attribute was absent

    @property
    def kind(self) -> EventKind:
        return EventKind.ATTRIBUTES

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "target": describe_node(self.target),
            "attribute_name": self.attribute_name,
            "old_value": self.old_value,
        }


@dataclass(frozen=True, eq=False)
class TextChange:
    """The data of a text node changed."""

    target: "Node"
    old_value: str | None

    @property
    def kind(self) -> EventKind:
        return EventKind.CHARACTER_DATA

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "target": describe_node(self.target),
            "old_value": self.old_value,
        }


@dataclass(frozen=True, eq=False)
class ChildListChange:
    """Children were inserted into and/or removed from `target`."""

    target: "Node"
    added_nodes: tuple["Node", ...] = ()
    removed_nodes: tuple["Node", ...] = ()
    next_sibling: "Node | None" = None

    @property
    def kind(self) -> EventKind:
        return EventKind.CHILD_LIST

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "target": describe_node(self.target),
            "added_nodes": [describe_node(n) for n in self.added_nodes],
            "removed_nodes": [describe_node(n) for n in self.removed_nodes],
            "next_sibling": describe_node(self.next_sibling) if self.next_sibling is not None else None,
        }


RawEvent = Union[AttributeChange, TextChange, ChildListChange]


@dataclass(frozen=True, eq=False)
class ReconstructedEvent:
    """
    A raw record augmented with the value it produced.

    `new_value` is meaningful for attribute and text records only; child list
    records are symmetric and need no augmentation.
    """

    record: RawEvent
    new_value: str | None = None

    @property
    def kind(self) -> EventKind:
        return self.record.kind

    @property
    def target(self) -> "Node":
        return self.record.target

    def to_dict(self) -> dict[str, Any]:
        d = self.record.to_dict()
        if self.kind is not EventKind.CHILD_LIST:
            d["new_value"] = self.new_value
        return d


@dataclass(frozen=True)
class Attribution:
    """Label and causal trace for the batch an event belongs to."""

    label: str = UNCLAIMED
    cause: str | None = None  # Stack trace of the claiming call, if tracked

    @property
    def claimed(self) -> bool:
        return self.label != UNCLAIMED

    @classmethod
    def unclaimed(cls) -> "Attribution":
        return cls()


@dataclass(frozen=True, eq=False)
class HistoryEntry:
    """One undoable primitive change on the timeline."""

    event: ReconstructedEvent
    attribution: Attribution

    @property
    def kind(self) -> EventKind:
        return self.event.kind

    @property
    def label(self) -> str:
        return self.attribution.label

    def to_dict(self) -> dict[str, Any]:
        d = self.event.to_dict()
        d["label"] = self.attribution.label
        if self.attribution.cause:
            d["cause"] = self.attribution.cause
        return d


def describe_node(node: "Node | None") -> str:
    """Short identifier for a node, e.g. `<div#main>` or `#text "hi"`."""
    if node is None:
        return "null"
    return node.describe()


def format_record(record: RawEvent | ReconstructedEvent | HistoryEntry) -> str:
    """Format a record for human-readable display."""
    label = None
    if isinstance(record, HistoryEntry):
        label = record.label
        record = record.event

    new_value = None
    reconstructed = isinstance(record, ReconstructedEvent)
    if reconstructed:
        new_value = record.new_value
        record = record.record

    if isinstance(record, AttributeChange):
        line = f"@ {describe_node(record.target)} [{record.attribute_name}] {record.old_value!r}"
        if reconstructed:
            line += f" -> {new_value!r}"
    elif isinstance(record, TextChange):
        line = f"~ {describe_node(record.target)} {record.old_value!r}"
        if reconstructed:
            line += f" -> {new_value!r}"
    else:
        parts = [f"{describe_node(record.target)}"]
        if record.added_nodes:
            parts.append("+" + ",".join(describe_node(n) for n in record.added_nodes))
        if record.removed_nodes:
            parts.append("-" + ",".join(describe_node(n) for n in record.removed_nodes))
        if record.next_sibling is not None:
            parts.append(f"before {describe_node(record.next_sibling)}")
        line = "* " + " ".join(parts)

    if label is not None:
        line += f"  ({label})"
    return line
