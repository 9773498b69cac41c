"""Pytest configuration and fixtures."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from domtimeline.attribution import Attributor
from domtimeline.config import TimelineOptions
from domtimeline.history import DomHistory
from domtimeline.tree import Document, Element


@pytest.fixture
def log_console() -> Console:
    """Console capturing hook output in memory."""
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def document() -> Document:
    """`<html><body id="body"></body></html>`, not yet observed."""
    doc = Document()
    html = doc.append_child(doc.create_element("html"))
    html.append_child(doc.create_element("body", {"id": "body"}))
    return doc


@pytest.fixture
def body(document: Document) -> Element:
    element = document.get_element_by_id("body")
    assert element is not None
    return element


@pytest.fixture
def history(document: Document, log_console: Console) -> DomHistory:
    """History recording everything below <html>."""
    return DomHistory.observe(document.document_element, console=log_console)


@pytest.fixture
def attributor(history: DomHistory) -> Attributor:
    return Attributor.from_options(history, TimelineOptions())
