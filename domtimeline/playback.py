"""
Automated travel through a recorded history.

rewind() and replay() walk the whole timeline; animate() rewinds to the
beginning and then re-applies every change at a fixed interval, so the tree
can be watched rebuilding itself.
"""

from __future__ import annotations

import time
from typing import Callable

from .history import DomHistory
from .records import Direction, HistoryEntry

StepCallback = Callable[[Direction, HistoryEntry], None]


def rewind(history: DomHistory, on_step: StepCallback | None = None) -> int:
    """Undo until the past is empty. Returns the number of steps taken."""
    steps = 0
    while history.past:
        entry = history.undo()
        if entry is None:
            break
        steps += 1
        if on_step:
            on_step(Direction.BACKWARD, entry)
    return steps


def replay(history: DomHistory, on_step: StepCallback | None = None) -> int:
    """Redo until the future is empty. Returns the number of steps taken."""
    steps = 0
    while history.future:
        entry = history.redo()
        if entry is None:
            break
        steps += 1
        if on_step:
            on_step(Direction.FORWARD, entry)
    return steps


def animate(
    history: DomHistory,
    *,
    interval: float = 0.0,
    on_step: StepCallback | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Rewind the whole history, then redo it one step per `interval` seconds.

    Returns the number of changes replayed.
    """
    rewind(history)

    def paced(direction: Direction, entry: HistoryEntry) -> None:
        if on_step:
            on_step(direction, entry)
        if interval > 0:
            sleep(interval)

    return replay(history, paced)
