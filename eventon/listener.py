"""Listener entries and per-name listener queues.

This module provides the Priority levels, ListenerEntry (a listener with
its priority) and ListenerQueue, the priority-ordered collection kept by
the registry for every event name or pattern.
"""

from collections.abc import Iterator
import inspect
from dataclasses import dataclass, field
from enum import IntEnum
from operator import attrgetter
from types import MethodType
from typing import Any, Self

from eventon._types import Handler
from eventon.event import Event
from eventon.exceptions import ConfigurationError, InvalidListenerError
from eventon.utils import callable_name


class Priority(IntEnum):
    """Conventional priority levels (higher = executed first).

    These are suggestions only; any ``int`` is a valid priority.
    """

    MIN = -300
    LOW = -200
    BELOW_NORMAL = -100
    NORMAL = 0
    ABOVE_NORMAL = 100
    HIGH = 200
    MAX = 300


def is_listener(obj: Any) -> bool:
    """Return True if *obj* can be invoked with an event."""
    if obj is None:
        return False
    return callable(getattr(obj, "handle", None)) or callable(obj)


def is_coroutine_listener(obj: Any) -> bool:
    """Return True if invoking *obj* would only create a coroutine."""
    handle = getattr(obj, "handle", None)
    target = handle if callable(handle) else obj
    return inspect.iscoroutinefunction(target) or inspect.iscoroutinefunction(
        getattr(target, "__call__", None)
    )


def same_listener(a: Any, b: Any) -> bool:
    """Identity comparison for listeners.

    Bound methods are re-created on every attribute access, so two bound
    methods count as the same listener when they wrap the same function on
    the same instance.
    """
    if a is b:
        return True
    if isinstance(a, MethodType) and isinstance(b, MethodType):
        return a.__self__ is b.__self__ and a.__func__ is b.__func__
    return False


def invoke(listener: Handler, event: Event) -> Any:
    """Call *listener* with *event*.

    Objects exposing ``handle()`` are called through it; anything else is
    called directly.
    """
    handle = getattr(listener, "handle", None)
    if callable(handle):
        return handle(event)
    return listener(event)  # type: ignore[operator]


@dataclass
class ListenerEntry:
    """Listener entry with metadata.

    Attributes:
        priority: Priority value (higher = executed first).
        listener: Callable or object with ``handle(event)``.
        name: Debug label for logging (defaults to the listener's qualname).

    Raises:
        InvalidListenerError: If listener is None, cannot be invoked or is
            a coroutine function.
        ConfigurationError: If priority is not an int.
    """

    priority: int
    listener: Handler
    name: str = field(default="")

    def __post_init__(self) -> None:
        if not is_listener(self.listener):
            raise InvalidListenerError(
                f"listener must be callable or expose handle(), "
                f"got {type(self.listener).__name__}"
            )
        if is_coroutine_listener(self.listener):
            raise InvalidListenerError(
                f"listener {callable_name(self.listener)} is a coroutine function, "
                f"async listeners are not supported"
            )
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise ConfigurationError(
                f"priority must be an int, got {type(self.priority).__name__}"
            )
        if not self.name:
            self.name = callable_name(self.listener)


class ListenerQueue:
    """Listeners of one event name, ordered by descending priority.

    Entries are appended as registered and only reordered by :meth:`sort`,
    which the dispatcher calls before every pass.  Equal priorities keep
    their registration order.

    The queue itself is not synchronized; :class:`~eventon.registry.Registry`
    guards every access with its lock.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ListenerEntry] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ListenerEntry]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"ListenerQueue({[e.name for e in self._items]!r})"

    def is_empty(self) -> bool:
        return not self._items

    def push(self, entry: ListenerEntry) -> Self:
        """Append *entry*.  Duplicates are allowed."""
        self._items.append(entry)
        return self

    def sort(self) -> Self:
        """Order entries by descending priority, in place.

        Post:
            priority[i] >= priority[i + 1] for every adjacent pair.
            Calling again leaves the order unchanged.
        """
        items = self._items
        if any(a.priority < b.priority for a, b in zip(items, items[1:])):
            # list.sort stays stable with reverse=True
            items.sort(key=attrgetter("priority"), reverse=True)
        return self

    def items(self) -> tuple[ListenerEntry, ...]:
        """Snapshot of the current entries, in storage order."""
        return tuple(self._items)

    def remove(self, listener: Handler | None) -> None:
        """Drop every entry whose listener is ``listener``.

        Identity is used (see :func:`same_listener`), not equality: two
        listeners with the same behaviour are distinct.  ``None`` and
        unknown listeners are no-ops.
        """
        if listener is None:
            return
        self._items[:] = [
            e for e in self._items if not same_listener(e.listener, listener)
        ]

    def clear(self) -> None:
        """Remove all entries, keeping the underlying list object."""
        self._items.clear()
