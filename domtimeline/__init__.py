"""
domtimeline - undo/redo history for a live, externally mutated tree.

Every attribute, text and child list change below an observed root is
recorded as a reversible event; the history can then be travelled backward
and forward. Changes made while reviewing the past are cancelled so the
timeline never forks.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .attribution import Attributor, TrackedNode
from .config import TimelineOptions, load_options
from .history import DomHistory
from .hooks import TimelineHooks
from .observer import MutationWatcher
from .records import (
    AttributeChange,
    Attribution,
    ChildListChange,
    Direction,
    EventKind,
    HistoryEntry,
    ReconstructedEvent,
    TextChange,
)
from .tree import Document, Element, Text, TreeError

__all__ = [
    "__version__",
    # Tree
    "Document",
    "Element",
    "Text",
    "TreeError",
    "MutationWatcher",
    # Records
    "AttributeChange",
    "Attribution",
    "ChildListChange",
    "Direction",
    "EventKind",
    "HistoryEntry",
    "ReconstructedEvent",
    "TextChange",
    # History
    "Attributor",
    "DomHistory",
    "TimelineHooks",
    "TimelineOptions",
    "TrackedNode",
    "load_options",
]
