"""
Forward/backward application of recorded changes.

Callers must hold the history's off-records guard while applying, so the
tree mutations performed here are not recorded again.
"""

from __future__ import annotations

from .records import (
    AttributeChange,
    ChildListChange,
    Direction,
    RawEvent,
    ReconstructedEvent,
    TextChange,
)
from .tree import Element, Node, Text, TreeError


def apply(event: RawEvent | ReconstructedEvent, direction: Direction) -> None:
    """
    Realize `event` on the tree in the given direction.

    Backward only needs old values, so raw records are accepted there.
    Forward needs the reconstructed resulting value for attribute and text
    records.

    Raises:
        TreeError: If a referenced node is no longer where the record expects
        ValueError: On a forward apply of an unreconstructed value record
    """
    if isinstance(event, ReconstructedEvent):
        record, new_value = event.record, event.new_value
    else:
        record, new_value = event, None
        if direction is Direction.FORWARD and not isinstance(record, ChildListChange):
            raise ValueError(f"Cannot redo an unreconstructed {record.kind.value} record")

    if isinstance(record, AttributeChange):
        value = record.old_value if direction is Direction.BACKWARD else new_value
        _set_attribute(record.target, record.attribute_name, value)
    elif isinstance(record, TextChange):
        value = record.old_value if direction is Direction.BACKWARD else new_value
        _set_text(record.target, value)
    elif direction is Direction.BACKWARD:
        _undo_child_list(record)
    else:
        _redo_child_list(record)


def _set_attribute(target: Node, name: str, value: str | None) -> None:
    if not isinstance(target, Element):
        raise TreeError(f"{target.describe()} has no attributes")
    # None = the attribute was absent on that side of the change
    if value is None:
        target.remove_attribute(name)
    else:
        target.set_attribute(name, value)


def _set_text(target: Node, value: str | None) -> None:
    if not isinstance(target, Text):
        raise TreeError(f"{target.describe()} is not a text node")
    target.data = value or ""


def _undo_child_list(change: ChildListChange) -> None:
    for node in reversed(change.added_nodes):
        node.remove()

    last_node = change.next_sibling
    for node in reversed(change.removed_nodes):
        change.target.insert_before(node, last_node)
        last_node = node


def _redo_child_list(change: ChildListChange) -> None:
    last_node = change.next_sibling
    for node in reversed(change.added_nodes):
        change.target.insert_before(node, last_node)
        last_node = node

    for node in reversed(change.removed_nodes):
        node.remove()
