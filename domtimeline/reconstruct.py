"""
Resulting-value reconstruction for a batch of raw records.

A raw record only carries the value *before* its change. By the time a batch
is inspected, only the tree's final value is observable, so intermediate
values are threaded backward through the batch: each record's resulting value
is the old value of the next record touching the same key, or the live value
for the most recent one.
"""

from __future__ import annotations

from typing import Callable, Hashable, Sequence

from .records import (
    AttributeChange,
    EventKind,
    RawEvent,
    ReconstructedEvent,
    TextChange,
)
from .tree import Element, Node, Text

# (target, kind, attribute_name or None) -> current value
LiveValue = Callable[[Node, EventKind, "str | None"], "str | None"]


def read_live_value(target: Node, kind: EventKind, attribute_name: str | None = None) -> str | None:
    """Read the present value of an attribute or text node from the tree."""
    if kind is EventKind.ATTRIBUTES:
        if not isinstance(target, Element) or attribute_name is None:
            return None
        return target.get_attribute(attribute_name)
    if kind is EventKind.CHARACTER_DATA:
        return target.data if isinstance(target, Text) else None
    return None


def _value_key(record: RawEvent) -> tuple[Hashable, ...]:
    name = record.attribute_name if isinstance(record, AttributeChange) else None
    # Nodes hash by identity
    return (record.target, record.kind, name)


def _live(record: RawEvent, live_value: LiveValue) -> str | None:
    name = record.attribute_name if isinstance(record, AttributeChange) else None
    return live_value(record.target, record.kind, name)


def reconstruct(
    records: Sequence[RawEvent],
    live_value: LiveValue = read_live_value,
) -> list[ReconstructedEvent]:
    """
    Augment a chronological batch with each record's resulting value.

    Args:
        records: One flush worth of raw records, oldest first
        live_value: Reads the tree's current value for a target

    Returns:
        Reconstructed events in the same (chronological) order
    """
    if len(records) == 1:
        record = records[0]
        if isinstance(record, (AttributeChange, TextChange)):
            return [ReconstructedEvent(record, _live(record, live_value))]
        return [ReconstructedEvent(record)]

    next_values: dict[tuple[Hashable, ...], str | None] = {}
    result: list[ReconstructedEvent] = []

    for record in reversed(records):
        if not isinstance(record, (AttributeChange, TextChange)):
            result.append(ReconstructedEvent(record))
            continue

        key = _value_key(record)
        if key in next_values:
            new_value = next_values[key]
        else:
            new_value = _live(record, live_value)
        next_values[key] = record.old_value
        result.append(ReconstructedEvent(record, new_value))

    result.reverse()
    return result
