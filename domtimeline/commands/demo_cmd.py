"""Demo command - record a scripted session, then travel through it."""

from __future__ import annotations

import json
from dataclasses import dataclass

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..attribution import Attributor
from ..config import TimelineOptions
from ..history import DomHistory
from ..playback import animate
from ..records import Direction, HistoryEntry, describe_node
from ..tree import Document, Element


@dataclass
class DemoSession:
    """A sample document under observation."""

    document: Document
    body: Element
    history: DomHistory
    attributor: Attributor


def build_demo_session(options: TimelineOptions, *, console: Console | None = None) -> DemoSession:
    """Create `<html><body><h1>Inbox</h1></body></html>` and start recording."""
    document = Document()
    html = document.create_element("html")
    body = document.create_element("body")
    document.append_child(html)
    html.append_child(body)
    heading = body.append_child(document.create_element("h1", {"id": "title"}))
    heading.append_child(document.create_text_node("Inbox"))

    history = DomHistory.observe(html, options, console=console)
    attributor = Attributor.from_options(history, options)
    return DemoSession(document, body, history, attributor)


def run_demo_mutations(session: DemoSession) -> None:
    """Apply a mix of claimed and unclaimed changes to the demo document."""
    document = session.document
    attributor = session.attributor
    page = attributor.wrap(session.body)

    @attributor.track(label="render messages")
    def render_messages(subjects: list[str]) -> None:
        listing = document.create_element("ul", {"id": "messages"})
        session.body.append_child(listing)
        for subject in subjects:
            item = listing.append_child(document.create_element("li"))
            item.text_content = subject
            item.set_attribute("class", "unread")

    page.set_attribute("class", "loading")
    render_messages(["Welcome", "Quarterly report"])
    page.set_attribute("class", "ready")

    title = document.get_element_by_id("title")
    if title is not None and title.first_child is not None:
        attributor.wrap(title.first_child).data = "Inbox (2)"

    page.style.background_color = "papayawhip"

    # Written behind the attribution layer's back
    listing = document.get_element_by_id("messages")
    if listing is not None and listing.first_child is not None:
        listing.first_child.remove_attribute("class")
    session.history.capture.flush_unclaimed()


def _history_table(entries: list[HistoryEntry], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Kind")
    table.add_column("Target")
    table.add_column("Change")
    table.add_column("Claim", style="cyan")

    for i, entry in enumerate(entries, 1):
        data = entry.to_dict()
        if entry.kind.value == "childList":
            parts = []
            if data["added_nodes"]:
                parts.append("+ " + ", ".join(data["added_nodes"]))
            if data["removed_nodes"]:
                parts.append("- " + ", ".join(data["removed_nodes"]))
            change = "; ".join(parts)
        elif "attribute_name" in data:
            change = f"{data['attribute_name']}: {data['old_value']!r} -> {data['new_value']!r}"
        else:
            change = f"{data['old_value']!r} -> {data['new_value']!r}"
        table.add_row(str(i), entry.kind.value, escape(data["target"]), escape(change), escape(entry.label))

    return table


def run_demo(
    options: TimelineOptions,
    *,
    playback: bool = False,
    interval: float = 0.0,
    output_json: bool = False,
    console: Console | None = None,
    log_console: Console | None = None,
) -> int:
    """
    Record the demo session, show its history, optionally play it back.

    Also demonstrates branch cancellation: a change made after undoing is
    reverted at once and lands in lost_future.

    Returns the number of entries recorded.
    """
    console = console or Console()
    session = build_demo_session(options, console=log_console)
    history = session.history
    root = session.document.document_element

    run_demo_mutations(session)
    recorded = list(history.past)

    if playback:
        console.print()
        console.print("[bold]Playback[/bold]")

        def show_step(direction: Direction, entry: HistoryEntry) -> None:
            arrow = ">>" if direction is Direction.FORWARD else "<<"
            markup = root.serialize() if root is not None else ""
            console.print(f"[dim]{arrow}[/dim] {escape(markup)}", highlight=False)

        animate(history, interval=interval, on_step=show_step)

    # Review the past, then try to write over it
    undone = 0
    for _ in range(2):
        if history.undo() is not None:
            undone += 1
    session.body.set_attribute("data-late", "1")
    history.capture.flush_unclaimed()
    while history.future:
        history.redo()

    if output_json:
        payload = {
            "past": [entry.to_dict() for entry in history.past],
            "lost_future": [record.to_dict() for record in history.lost_future],
            "undone_before_cancel": undone,
        }
        console.print(json.dumps(payload, indent=2), markup=False, highlight=False, soft_wrap=True)
    else:
        console.print(_history_table(history.past, "DOM history"))
        console.print(
            f"lost_future: {len(history.lost_future)} "
            f"({', '.join(describe_node(r.target) for r in history.lost_future) or 'none'})",
            highlight=False,
        )
        if root is not None:
            console.print(escape(root.serialize()), highlight=False)

    return len(recorded)
