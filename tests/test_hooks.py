"""Tests for the logging and breakpoint hooks."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from domtimeline.history import DomHistory
from domtimeline.hooks import TimelineHooks
from domtimeline.observer import MutationWatcher
from domtimeline.records import HistoryEntry
from domtimeline.tree import Document, Element


def _history(document: Document, hooks: TimelineHooks) -> DomHistory:
    watcher = MutationWatcher(document.document_element).observe()
    return DomHistory(watcher, hooks=hooks)


def test_batches_are_logged_with_label_and_count(history: DomHistory, body: Element, log_console: Console):
    body.set_attribute("class", "a")
    body.set_attribute("class", "b")
    history.capture.flush_claimed("render", "File \"app.py\", line 3")

    output = log_console.file.getvalue()
    assert "render [2]" in output
    assert "@ <body#body> [class] None -> 'a'" in output
    assert "@ <body#body> [class] 'a' -> 'b'" in output
    assert 'File "app.py", line 3' in output


def test_logging_can_be_disabled(document: Document, body: Element):
    console = Console(file=io.StringIO())
    history = _history(document, TimelineHooks(console, log_records=False))

    body.set_attribute("class", "a")
    history.capture.flush_unclaimed()

    assert len(history.past) == 1
    assert console.file.getvalue() == ""


def test_breakpoint_sees_each_entry_before_commit(document: Document, body: Element):
    seen: list[tuple[str, int]] = []
    history: DomHistory

    def on_entry(entry: HistoryEntry) -> None:
        seen.append((entry.event.new_value, len(history.past)))

    history = _history(document, TimelineHooks(Console(file=io.StringIO()), breakpoint=on_entry))
    body.set_attribute("class", "a")
    body.set_attribute("title", "t")
    history.capture.flush_unclaimed()

    assert seen == [("a", 0), ("t", 0)]
    assert len(history.past) == 2


def test_breakpoint_errors_propagate(document: Document, body: Element):
    def explode(entry: HistoryEntry) -> None:
        if entry.event.new_value == "bad":
            raise RuntimeError("inspect me")

    history = _history(document, TimelineHooks(Console(file=io.StringIO()), breakpoint=explode))
    body.set_attribute("class", "bad")

    with pytest.raises(RuntimeError):
        history.capture.flush_unclaimed()
    assert history.past == []


def test_cancelled_batches_are_logged(history: DomHistory, body: Element, log_console: Console):
    body.set_attribute("class", "a")
    history.capture.flush_unclaimed()
    history.undo()

    body.set_attribute("title", "late")
    history.capture.flush_claimed("late edit")

    output = log_console.file.getvalue()
    assert "late edit [1]" in output
    assert "@ <body#body> [title] None" in output
    assert not body.has_attribute("title")


def test_off_records_flushes_are_not_logged(history: DomHistory, body: Element, log_console: Console):
    body.set_attribute("class", "a")
    history.capture.flush_unclaimed()
    before = log_console.file.getvalue()

    with history.off_records():
        body.set_attribute("class", "quiet")
        history.capture.flush_claimed("quiet edit")
    history.undo()
    history.redo()

    assert log_console.file.getvalue() == before
    assert "quiet edit" not in before
