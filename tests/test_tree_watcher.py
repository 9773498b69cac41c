"""
Tests for the in-memory tree and its mutation watcher.

The watcher must deliver, in chronological order:
- attribute records with the previous value
- text records with the previous data
- child list records with full added/removed sequences and a next-sibling anchor
"""

from __future__ import annotations

import pytest

from domtimeline.observer import MutationWatcher
from domtimeline.records import AttributeChange, ChildListChange, EventKind, TextChange
from domtimeline.tree import Document, Element, TreeError


@pytest.fixture
def watcher(document: Document) -> MutationWatcher:
    return MutationWatcher(document.document_element).observe()


# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------


def test_attribute_records_carry_old_value(watcher: MutationWatcher, body: Element):
    body.set_attribute("class", "a")
    body.set_attribute("class", "b")
    body.remove_attribute("class")

    records = watcher.drain_pending()

    assert [type(r) for r in records] == [AttributeChange] * 3
    assert [r.old_value for r in records] == [None, "a", "b"]
    assert all(r.attribute_name == "class" and r.target is body for r in records)
    assert not body.has_attribute("class")


def test_removing_missing_attribute_is_silent(watcher: MutationWatcher, body: Element):
    body.remove_attribute("missing")
    assert watcher.drain_pending() == []


def test_text_records(watcher: MutationWatcher, document: Document, body: Element):
    text = body.append_child(document.create_text_node("hello"))
    watcher.drain_pending()

    text.data = "world"

    (record,) = watcher.drain_pending()
    assert isinstance(record, TextChange)
    assert record.kind is EventKind.CHARACTER_DATA
    assert record.old_value == "hello"
    assert body.text_content == "world"


def test_insert_before_records_next_sibling(watcher: MutationWatcher, document: Document, body: Element):
    sibling = body.append_child(document.create_element("p"))
    node = document.create_element("span")
    watcher.drain_pending()

    body.insert_before(node, sibling)

    (record,) = watcher.drain_pending()
    assert isinstance(record, ChildListChange)
    assert record.target is body
    assert record.added_nodes == (node,)
    assert record.removed_nodes == ()
    assert record.next_sibling is sibling
    assert body.children == [node, sibling]


def test_moving_a_node_records_removal_then_insertion(watcher: MutationWatcher, document: Document, body: Element):
    a = body.append_child(document.create_element("a"))
    b = body.append_child(document.create_element("b"))
    watcher.drain_pending()

    body.insert_before(b, a)

    removal, insertion = watcher.drain_pending()
    assert removal.removed_nodes == (b,) and removal.next_sibling is None
    assert insertion.added_nodes == (b,) and insertion.next_sibling is a
    assert body.children == [b, a]


def test_replace_child_is_one_record(watcher: MutationWatcher, document: Document, body: Element):
    old = body.append_child(document.create_element("old"))
    tail = body.append_child(document.create_element("tail"))
    new = document.create_element("new")
    watcher.drain_pending()

    body.replace_child(new, old)

    (record,) = watcher.drain_pending()
    assert record.added_nodes == (new,)
    assert record.removed_nodes == (old,)
    assert record.next_sibling is tail
    assert old.parent is None


def test_text_content_replaces_all_children(watcher: MutationWatcher, document: Document, body: Element):
    first = body.append_child(document.create_element("i"))
    second = body.append_child(document.create_element("u"))
    watcher.drain_pending()

    body.text_content = "plain"

    (record,) = watcher.drain_pending()
    assert record.removed_nodes == (first, second)
    assert len(record.added_nodes) == 1
    assert body.serialize() == '<body id="body">plain</body>'


def test_style_writes_are_attribute_changes(watcher: MutationWatcher, body: Element):
    body.style.background_color = "red"
    body.style.set_property("margin", "0")

    records = watcher.drain_pending()
    assert [r.attribute_name for r in records] == ["style", "style"]
    assert records[1].old_value == "background-color: red"
    assert body.style.background_color == "red"
    assert body.get_attribute("style") == "background-color: red; margin: 0"


def test_clearing_last_style_property_removes_attribute(watcher: MutationWatcher, body: Element):
    body.style.color = ""
    assert watcher.drain_pending() == []
    assert not body.has_attribute("style")

    body.style.color = "red"
    body.style.color = ""

    records = watcher.drain_pending()
    assert [r.old_value for r in records] == [None, "color: red"]
    assert not body.has_attribute("style")


# -----------------------------------------------------------------------------
# Scope and options
# -----------------------------------------------------------------------------


def test_detached_nodes_are_not_observed(watcher: MutationWatcher, document: Document):
    orphan = document.create_element("div")
    orphan.set_attribute("class", "x")
    orphan.append_child(document.create_element("span"))

    assert watcher.drain_pending() == []


def test_inserted_nodes_join_the_observed_document(watcher: MutationWatcher, body: Element):
    paragraph = Element("p")
    bold = paragraph.append_child(Element("b"))
    body.append_child(paragraph)
    watcher.drain_pending()

    paragraph.set_attribute("class", "x")
    bold.set_attribute("class", "y")

    records = watcher.drain_pending()
    assert [r.target for r in records] == [paragraph, bold]
    assert paragraph.owner_document is body.owner_document
    assert bold.owner_document is body.owner_document


def test_nodes_from_another_document_are_adopted(watcher: MutationWatcher, body: Element):
    other = Document()
    other_root = other.append_child(other.create_element("html"))
    other_watcher = MutationWatcher(other_root).observe()
    section = other_root.append_child(other.create_element("section"))
    other_watcher.drain_pending()

    body.append_child(section)
    (removal,) = other_watcher.drain_pending()
    assert removal.removed_nodes == (section,)

    section.set_attribute("class", "moved")

    assert other_watcher.drain_pending() == []
    insertion, change = watcher.drain_pending()
    assert insertion.added_nodes == (section,)
    assert change.target is section and change.attribute_name == "class"


def test_replacement_node_is_adopted(watcher: MutationWatcher, document: Document, body: Element):
    old = body.append_child(document.create_element("old"))
    new = Element("new")
    body.replace_child(new, old)
    watcher.drain_pending()

    new.set_attribute("class", "x")

    (record,) = watcher.drain_pending()
    assert record.target is new


def test_changes_outside_root_are_ignored(document: Document, body: Element):
    watcher = MutationWatcher(body).observe()
    document.document_element.set_attribute("lang", "en")
    body.set_attribute("class", "inside")

    records = watcher.drain_pending()
    assert [r.target for r in records] == [body]


def test_subtree_false_only_watches_root(document: Document, body: Element):
    watcher = MutationWatcher(document.document_element, subtree=False).observe()
    body.set_attribute("class", "deep")
    assert watcher.drain_pending() == []


def test_kind_filters(document: Document, body: Element):
    watcher = MutationWatcher(document.document_element, attributes=False).observe()
    body.set_attribute("class", "x")
    body.append_child(document.create_element("p"))

    records = watcher.drain_pending()
    assert [r.kind for r in records] == [EventKind.CHILD_LIST]


def test_deliver_calls_callback(document: Document, body: Element):
    batches: list[list] = []
    watcher = MutationWatcher(document.document_element, batches.append).observe()

    assert watcher.deliver() == 0
    body.set_attribute("a", "1")
    body.set_attribute("b", "2")

    assert watcher.deliver() == 2
    assert len(batches) == 1 and len(batches[0]) == 2
    assert watcher.drain_pending() == []


def test_disconnect_stops_recording(watcher: MutationWatcher, body: Element):
    body.set_attribute("a", "1")
    watcher.disconnect()
    body.set_attribute("b", "2")

    assert not watcher.observing
    assert watcher.drain_pending() == []


def test_observe_requires_document():
    with pytest.raises(TreeError):
        MutationWatcher(Element("div")).observe()


# -----------------------------------------------------------------------------
# Tree errors
# -----------------------------------------------------------------------------


def test_reference_must_be_a_child(document: Document, body: Element):
    stranger = document.create_element("p")
    with pytest.raises(TreeError):
        body.insert_before(document.create_element("span"), stranger)


def test_cannot_insert_ancestor(document: Document, body: Element):
    with pytest.raises(TreeError):
        body.append_child(document.document_element)


def test_text_nodes_have_no_children(document: Document):
    text = document.create_text_node("x")
    with pytest.raises(TreeError):
        text.append_child(document.create_element("b"))


def test_remove_child_of_other_parent(document: Document, body: Element):
    with pytest.raises(TreeError):
        body.remove_child(document.create_element("p"))
