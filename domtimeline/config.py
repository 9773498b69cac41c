from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass
class TimelineOptions:
    """Options controlling capture, attribution and logging."""

    # Attribute changes to call stacks (costly: one traceback per claim)
    enable_callstack_tracking: bool = True
    # Print every committed/cancelled batch through the hooks
    log_records: bool = True
    # Evict the oldest past entries beyond this many (None = unbounded)
    max_past: int | None = None
    # Frames kept per captured stack
    stack_limit: int = 12


def _coerce_bool(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false")
    return value


def _coerce_positive_int(data: dict[str, Any], key: str, default: int | None) -> int | None:
    value = data.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"{key} must be a positive integer")
    return value


def parse_options(data: dict[str, Any]) -> TimelineOptions:
    """Build options from the `[timeline]` table of a parsed config."""
    table = data.get("timeline", {})
    if not isinstance(table, dict):
        raise ValueError("[timeline] must be a table")

    defaults = TimelineOptions()
    stack_limit = _coerce_positive_int(table, "stack_limit", defaults.stack_limit)
    return TimelineOptions(
        enable_callstack_tracking=_coerce_bool(
            table, "enable_callstack_tracking", defaults.enable_callstack_tracking
        ),
        log_records=_coerce_bool(table, "log_records", defaults.log_records),
        max_past=_coerce_positive_int(table, "max_past", defaults.max_past),
        stack_limit=stack_limit if stack_limit is not None else defaults.stack_limit,
    )


def load_options(path: Path) -> TimelineOptions:
    """
    Load timeline options from TOML.

    Missing keys fall back to defaults; malformed values raise ValueError.
    """
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"{path}: {e}") from e
    return parse_options(data)
