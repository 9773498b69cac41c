"""
Attribution of tree changes to the operations that caused them.

Instead of patching the tree classes, call sites opt in:
- claim(label): context manager around any block of tree writes
- track(): decorator labelling every call of a function
- wrap(node): interception proxy labelling each method call / property
  write on a node, including writes to its nested `style` property bag

Around each claimed operation, pending changes are first flushed as
unclaimed, then the operation runs, then its changes are flushed under the
label with the current call stack as cause. While the history is applying
its own changes (off-records) no flush happens at all.
"""

from __future__ import annotations

import contextlib
import functools
import traceback
from typing import Any, Callable, Iterator, TypeVar

from .config import TimelineOptions
from .history import DomHistory
from .tree import Node, StyleDeclaration

F = TypeVar("F", bound=Callable[..., Any])

# Frames from these files are noise in a captured cause
_INTERNAL_FILES = frozenset({__file__, contextlib.__file__})


class Attributor:
    """Labels batches of changes flushed into a DomHistory."""

    def __init__(
        self,
        history: DomHistory,
        *,
        enable_callstack_tracking: bool = True,
        stack_limit: int = 12,
    ):
        self.history = history
        self.enable_callstack_tracking = enable_callstack_tracking
        self.stack_limit = stack_limit

    @classmethod
    def from_options(cls, history: DomHistory, options: TimelineOptions) -> "Attributor":
        return cls(
            history,
            enable_callstack_tracking=options.enable_callstack_tracking,
            stack_limit=options.stack_limit,
        )

    def capture_cause(self) -> str | None:
        """Format the caller's stack, or None when tracking is disabled."""
        if not self.enable_callstack_tracking:
            return None
        frames = [f for f in traceback.extract_stack() if f.filename not in _INTERNAL_FILES]
        return "".join(traceback.format_list(frames[-self.stack_limit:]))

    @contextlib.contextmanager
    def claim(self, label: str) -> Iterator[None]:
        """
        Attribute every change made inside the block to `label`.

        If the block raises, its changes stay pending and are later flushed
        as unclaimed.
        """
        capture = self.history.capture
        if not self.history.is_off_records:
            capture.flush_unclaimed()
        yield
        if not self.history.is_off_records:
            capture.flush_claimed(label, self.capture_cause())

    def track(self, func: F | None = None, *, label: str | None = None) -> Any:
        """
        Decorator claiming every call of the function.

        Usable bare (`@attributor.track`) or with a label
        (`@attributor.track(label="render")`). Default label: "call <name>".
        """

        def decorate(fn: F) -> F:
            claim_label = label or f"call {fn.__name__}"

            @functools.wraps(fn)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                with self.claim(claim_label):
                    return fn(*args, **kwargs)

            return wrapper  # type: ignore[return-value]

        if func is not None:
            return decorate(func)
        return decorate

    def wrap(self, node: Node) -> "TrackedNode":
        return TrackedNode(node, self)


def unwrap(value: Any) -> Any:
    """Return the underlying node of a tracked proxy (other values unchanged)."""
    return getattr(value, "__wrapped__", value) if isinstance(value, TrackedNode) else value


class TrackedNode:
    """
    Proxy around a node that claims each write made through it.

    Method calls are labelled "call <method>", property writes "set <name>",
    and writes through `.style` "set style.<name>". Reads pass through and
    return plain (unwrapped) values.
    """

    def __init__(self, node: Node, attributor: Attributor):
        object.__setattr__(self, "__wrapped__", node)
        object.__setattr__(self, "_attributor", attributor)

    def __getattr__(self, name: str) -> Any:
        node = object.__getattribute__(self, "__wrapped__")
        attributor: Attributor = object.__getattribute__(self, "_attributor")
        value = getattr(node, name)

        if isinstance(value, StyleDeclaration):
            return TrackedStyle(value, attributor)
        if callable(value) and not name.startswith("_"):
            return _claiming(value, attributor, f"call {name}")
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        node = object.__getattribute__(self, "__wrapped__")
        attributor: Attributor = object.__getattribute__(self, "_attributor")
        with attributor.claim(f"set {name}"):
            setattr(node, name, unwrap(value))

    def __repr__(self) -> str:
        return f"<TrackedNode {object.__getattribute__(self, '__wrapped__').describe()}>"


class TrackedStyle:
    """Interception boundary for the nested style property bag."""

    def __init__(self, style: StyleDeclaration, attributor: Attributor):
        object.__setattr__(self, "_style", style)
        object.__setattr__(self, "_attributor", attributor)

    def __getattr__(self, name: str) -> Any:
        style = object.__getattribute__(self, "_style")
        attributor: Attributor = object.__getattribute__(self, "_attributor")
        value = getattr(style, name)
        if callable(value) and not name.startswith("_"):
            return _claiming(value, attributor, f"call style.{name}")
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        style = object.__getattribute__(self, "_style")
        attributor: Attributor = object.__getattribute__(self, "_attributor")
        with attributor.claim(f"set style.{name}"):
            setattr(style, name, value)


def _claiming(method: Callable[..., Any], attributor: Attributor, label: str) -> Callable[..., Any]:
    @functools.wraps(method)
    def claimed(*args: Any, **kwargs: Any) -> Any:
        args = tuple(unwrap(a) for a in args)
        kwargs = {k: unwrap(v) for k, v in kwargs.items()}
        with attributor.claim(label):
            return method(*args, **kwargs)

    return claimed
