"""Tests for TOML configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from domtimeline.config import TimelineOptions, load_options, parse_options


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "timeline.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_timeline_table(tmp_path: Path):
    options = load_options(_write(tmp_path, "[other]\nkey = 1\n"))
    assert options == TimelineOptions()


def test_values_are_loaded(tmp_path: Path):
    path = _write(
        tmp_path,
        "[timeline]\n"
        "enable_callstack_tracking = false\n"
        "log_records = false\n"
        "max_past = 500\n"
        "stack_limit = 4\n",
    )

    options = load_options(path)

    assert options.enable_callstack_tracking is False
    assert options.log_records is False
    assert options.max_past == 500
    assert options.stack_limit == 4


@pytest.mark.parametrize(
    "table",
    [
        {"log_records": "yes"},
        {"max_past": 0},
        {"max_past": True},
        {"stack_limit": -3},
    ],
)
def test_invalid_values_raise(table: dict):
    with pytest.raises(ValueError):
        parse_options({"timeline": table})


def test_timeline_must_be_a_table():
    with pytest.raises(ValueError):
        parse_options({"timeline": 3})


def test_malformed_toml_raises_value_error(tmp_path: Path):
    with pytest.raises(ValueError):
        load_options(_write(tmp_path, "[timeline\nmax_past = "))
