"""
Minimal DOM-like tree observed by the timeline.

This module provides:
- Document, Element and Text nodes with the mutation surface the timeline
  needs (attributes, text data, child insertion/removal)
- StyleDeclaration, a nested property bag backed by the `style` attribute
- Mutation notification to watchers registered on the owning document

The tree knows nothing about history. Every mutation is reported as a raw
record to the watchers of its document, which decide whether they care.
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING, Iterator

from .records import AttributeChange, ChildListChange, RawEvent, TextChange

if TYPE_CHECKING:
    from .observer import MutationWatcher


class TreeError(ValueError):
    """Raised when a tree operation references a node in the wrong place."""


class Node:
    """Base class for all tree nodes."""

    node_name = "#node"

    def __init__(self, document: "Document | None" = None):
        self.owner_document = document
        self.parent: Node | None = None
        self.children: list[Node] = []

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    @property
    def first_child(self) -> "Node | None":
        return self.children[0] if self.children else None

    @property
    def next_sibling(self) -> "Node | None":
        if self.parent is None:
            return None
        siblings = self.parent.children
        index = self.parent._index_of(self)
        return siblings[index + 1] if index + 1 < len(siblings) else None

    def contains(self, other: "Node | None") -> bool:
        """True if `other` is this node or one of its descendants."""
        node = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def iter_descendants(self) -> Iterator["Node"]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def _index_of(self, child: "Node") -> int:
        for i, candidate in enumerate(self.children):
            if candidate is child:
                return i
        raise TreeError(f"{child.describe()} is not a child of {self.describe()}")

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def insert_before(self, node: "Node", reference: "Node | None") -> "Node":
        """
        Insert `node` before `reference` (or at the end when None).

        A node that already has a parent is first removed from it, which is
        reported as a separate child list change on the old parent.
        """
        self._check_can_contain(node)
        if reference is not None and reference.parent is not self:
            raise TreeError(f"{reference.describe()} is not a child of {self.describe()}")

        if reference is node:
            reference = node.next_sibling

        if node.parent is not None:
            node.parent.remove_child(node)

        index = self._index_of(reference) if reference is not None else len(self.children)
        self.children.insert(index, node)
        node.parent = self
        self._adopt(node)
        self._notify(ChildListChange(target=self, added_nodes=(node,), next_sibling=reference))
        return node

    def append_child(self, node: "Node") -> "Node":
        return self.insert_before(node, None)

    def remove_child(self, node: "Node") -> "Node":
        if node.parent is not self:
            raise TreeError(f"{node.describe()} is not a child of {self.describe()}")
        next_sibling = node.next_sibling
        del self.children[self._index_of(node)]
        node.parent = None
        self._notify(ChildListChange(target=self, removed_nodes=(node,), next_sibling=next_sibling))
        return node

    def replace_child(self, node: "Node", old: "Node") -> "Node":
        """Replace child `old` with `node`, reported as a single change."""
        if old.parent is not self:
            raise TreeError(f"{old.describe()} is not a child of {self.describe()}")
        if node is old:
            return old
        self._check_can_contain(node)

        if node.parent is not None:
            node.parent.remove_child(node)

        next_sibling = old.next_sibling
        index = self._index_of(old)
        self.children[index] = node
        node.parent = self
        self._adopt(node)
        old.parent = None
        self._notify(
            ChildListChange(
                target=self,
                added_nodes=(node,),
                removed_nodes=(old,),
                next_sibling=next_sibling,
            )
        )
        return old

    def remove(self) -> None:
        """Detach this node from its parent (no-op when already detached)."""
        if self.parent is not None:
            self.parent.remove_child(self)

    def _adopt(self, node: "Node") -> None:
        """Move `node` and its subtree into this node's document."""
        document = self._document
        node.owner_document = document
        for descendant in node.iter_descendants():
            descendant.owner_document = document

    def _check_can_contain(self, node: "Node") -> None:
        if isinstance(self, Text):
            raise TreeError("Text nodes cannot have children")
        if isinstance(node, Document):
            raise TreeError("A document cannot be inserted into a tree")
        if node.contains(self):
            raise TreeError(f"Cannot insert {node.describe()} into its own subtree")

    # -------------------------------------------------------------------------
    # Text content
    # -------------------------------------------------------------------------

    @property
    def text_content(self) -> str:
        return "".join(child.text_content for child in self.children)

    @text_content.setter
    def text_content(self, value: str) -> None:
        """Replace all children with a single text node (or none for "")."""
        removed = tuple(self.children)
        for child in removed:
            child.parent = None
        self.children = []

        added: tuple[Node, ...] = ()
        if value:
            text = Text(str(value), self._document)
            text.parent = self
            self.children.append(text)
            added = (text,)

        if added or removed:
            self._notify(ChildListChange(target=self, added_nodes=added, removed_nodes=removed))

    # -------------------------------------------------------------------------
    # Notification / display
    # -------------------------------------------------------------------------

    @property
    def _document(self) -> "Document | None":
        return self.owner_document

    def _notify(self, record: RawEvent) -> None:
        document = self._document
        if document is None:
            return
        for watcher in list(document._watchers):
            watcher._enqueue(record)

    def describe(self) -> str:
        return self.node_name

    def serialize(self) -> str:
        return "".join(child.serialize() for child in self.children)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()}>"


class Document(Node):
    """Root of a tree; owns the watcher registry."""

    node_name = "#document"

    def __init__(self) -> None:
        super().__init__(None)
        self._watchers: list["MutationWatcher"] = []

    @property
    def _document(self) -> "Document":
        return self

    @property
    def document_element(self) -> "Element | None":
        for child in self.children:
            if isinstance(child, Element):
                return child
        return None

    def create_element(self, tag: str, attributes: dict[str, str] | None = None) -> "Element":
        element = Element(tag, self)
        if attributes:
            # Detached nodes are not observed, so no records are lost here
            element.attributes.update({k: str(v) for k, v in attributes.items()})
        return element

    def create_text_node(self, data: str) -> "Text":
        return Text(data, self)

    def get_element_by_id(self, element_id: str) -> "Element | None":
        for node in self.iter_descendants():
            if isinstance(node, Element) and node.attributes.get("id") == element_id:
                return node
        return None


class Element(Node):
    """An element with ordered attributes and a `style` property bag."""

    def __init__(self, tag: str, document: Document | None = None):
        super().__init__(document)
        self.tag = tag.lower()
        self.attributes: dict[str, str] = {}
        self._style: StyleDeclaration | None = None

    @property
    def node_name(self) -> str:  # type: ignore[override]
        return self.tag

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def set_attribute(self, name: str, value: str) -> None:
        old_value = self.attributes.get(name)
        self.attributes[name] = str(value)
        self._notify(AttributeChange(target=self, attribute_name=name, old_value=old_value))

    def remove_attribute(self, name: str) -> None:
        if name not in self.attributes:
            return
        old_value = self.attributes.pop(name)
        self._notify(AttributeChange(target=self, attribute_name=name, old_value=old_value))

    @property
    def id(self) -> str:
        return self.attributes.get("id", "")

    @id.setter
    def id(self, value: str) -> None:
        self.set_attribute("id", value)

    @property
    def style(self) -> "StyleDeclaration":
        if self._style is None:
            self._style = StyleDeclaration(self)
        return self._style

    def describe(self) -> str:
        element_id = self.attributes.get("id")
        return f"<{self.tag}#{element_id}>" if element_id else f"<{self.tag}>"

    def serialize(self) -> str:
        attrs = "".join(f' {k}="{html.escape(v, quote=True)}"' for k, v in self.attributes.items())
        inner = "".join(child.serialize() for child in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"


class Text(Node):
    """A text node; its `data` changes are reported as text changes."""

    node_name = "#text"

    def __init__(self, data: str = "", document: Document | None = None):
        super().__init__(document)
        self._data = str(data)

    @property
    def data(self) -> str:
        return self._data

    @data.setter
    def data(self, value: str) -> None:
        old_value = self._data
        self._data = str(value)
        self._notify(TextChange(target=self, old_value=old_value))

    @property
    def text_content(self) -> str:  # type: ignore[override]
        return self._data

    @text_content.setter
    def text_content(self, value: str) -> None:
        self.data = value

    def describe(self) -> str:
        preview = self._data if len(self._data) <= 12 else self._data[:11] + "…"
        return f'#text "{preview}"'

    def serialize(self) -> str:
        return html.escape(self._data, quote=False)


class StyleDeclaration:
    """
    Inline style of an element, e.g. `element.style.background_color = "red"`.

    Every write re-serializes the whole declaration into the element's
    `style` attribute, so the watcher only ever sees attribute changes.
    Python attribute names map to CSS names by replacing `_` with `-`.
    """

    def __init__(self, element: Element):
        object.__setattr__(self, "_element", element)

    def _parse(self) -> dict[str, str]:
        declarations: dict[str, str] = {}
        for part in (self._element.get_attribute("style") or "").split(";"):
            name, sep, value = part.partition(":")
            if sep and name.strip():
                declarations[name.strip()] = value.strip()
        return declarations

    def _write(self, declarations: dict[str, str]) -> None:
        if not declarations:
            self._element.remove_attribute("style")
            return
        text = "; ".join(f"{k}: {v}" for k, v in declarations.items())
        self._element.set_attribute("style", text)

    def get_property_value(self, name: str) -> str:
        return self._parse().get(name, "")

    def set_property(self, name: str, value: str | None) -> None:
        declarations = self._parse()
        if value is None or value == "":
            declarations.pop(name, None)
        else:
            declarations[name] = str(value)
        self._write(declarations)

    def __getattr__(self, name: str) -> str:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get_property_value(_css_name(name))

    def __setattr__(self, name: str, value: str | None) -> None:
        self.set_property(_css_name(name), value)


def _css_name(name: str) -> str:
    return name.replace("_", "-")
