"""Registry for listener management.

This module provides Registry, which owns the mapping from event name (or
wildcard pattern) to ListenerQueue, the index of listened names, and the
table of pre-registered event prototypes.
"""

import threading
from collections.abc import Mapping
from typing import Any

from loguru import logger

from eventon._types import Handler, Subscriber
from eventon.event import Event
from eventon.exceptions import InvalidListenerError, InvalidSubscriberError
from eventon.listener import ListenerEntry, ListenerQueue, Priority, is_listener
from eventon.utils import check_name, check_pattern

log = logger.bind(source=__name__)


class Registry:
    """Registry table for event listeners and event prototypes.

    Keys of the listener table are plain event names, group patterns
    (``"app.*"``) or the global wildcard ``"*"``.  A key is present in
    :attr:`listened_names` iff its queue holds at least one entry.

    Every read and write of the tables goes through one re-entrant lock,
    so registration may run concurrently with dispatch.  Listeners are
    never invoked while the lock is held: dispatch works on snapshots
    returned by :meth:`snapshot`.
    """

    def __init__(self, name: str = "", sample: type[Event] = Event) -> None:
        """Initialize empty registry.

        Args:
            name: Registry name, for logging.
            sample: Event class used to build events for names without a
                registered prototype.

        Post:
            All tables empty.
        """
        self.name = name
        self.sample = sample
        self._lock = threading.RLock()
        self._listeners: dict[str, ListenerQueue] = {}
        self._listened_names: set[str] = set()
        self._events: dict[str, Event] = {}

    # -- listeners ------------------------------------------------------------

    def add_listener(self, name: str, entry: ListenerEntry) -> None:
        """Register a listener entry under a name or pattern.

        Args:
            name: Event name, ``prefix.*`` group pattern or ``*``.
            entry: Listener entry with priority.

        Post:
            entry appended to the queue for name; name is listened.

        Raises:
            InvalidEventNameError: If name is not a valid key.
            InvalidListenerError: If entry holds no usable listener.
        """
        key = check_pattern(name)
        if not isinstance(entry, ListenerEntry):
            raise InvalidListenerError(
                f"expected ListenerEntry, got {type(entry).__name__}"
            )
        with self._lock:
            queue = self._listeners.get(key)
            if queue is None:
                queue = self._listeners[key] = ListenerQueue()
                self._listened_names.add(key)
            queue.push(entry)
        log.debug("Listen {} on '{}' (priority={})", entry.name, key, entry.priority)

    def listen(
        self, name: str, listener: Handler, priority: int = Priority.NORMAL
    ) -> None:
        """Register *listener* under *name* with *priority*.

        Raises:
            InvalidEventNameError: If name is not a valid key.
            InvalidListenerError: If listener is None or cannot be invoked.
        """
        self.add_listener(name, ListenerEntry(priority, listener))

    def subscribe(self, subscriber: Subscriber) -> None:
        """Register every listener declared by *subscriber*.

        ``subscriber.subscribed_events()`` maps event names to one of:

        - a listener (registered at :attr:`Priority.NORMAL`)
        - a :class:`ListenerEntry`
        - a ``(priority, listener)`` tuple

        Raises:
            InvalidSubscriberError: If a value has any other shape.
        """
        events = subscriber.subscribed_events()
        if not isinstance(events, Mapping):
            raise InvalidSubscriberError(
                f"subscribed_events() must return a mapping, "
                f"got {type(events).__name__}"
            )
        for name, value in events.items():
            self.add_listener(name, self._to_entry(name, value))

    @staticmethod
    def _to_entry(name: str, value: Any) -> ListenerEntry:
        match value:
            case ListenerEntry():
                return value
            case (int() as priority, listener) if not isinstance(priority, bool):
                return ListenerEntry(priority, listener)
            case _ if is_listener(value):
                return ListenerEntry(Priority.NORMAL, value)
            case _:
                raise InvalidSubscriberError(
                    f"subscription for '{name}' must be a listener, a "
                    f"ListenerEntry or a (priority, listener) pair, "
                    f"got {type(value).__name__}"
                )

    def has_listeners(self, name: str) -> bool:
        """Exact-key check; patterns are not expanded."""
        with self._lock:
            return name in self._listened_names

    def listener_count(self, name: str) -> int:
        with self._lock:
            queue = self._listeners.get(name)
            return len(queue) if queue is not None else 0

    def listened_names(self) -> list[str]:
        """Sorted snapshot of all listened names and patterns."""
        with self._lock:
            return sorted(self._listened_names)

    def listeners_for(self, name: str) -> tuple[ListenerEntry, ...]:
        """Entries registered under the exact key, in execution order."""
        return self.snapshot(name) or ()

    def listeners(self) -> dict[str, tuple[ListenerEntry, ...]]:
        """Snapshot of the whole listener table, in execution order."""
        with self._lock:
            return {key: q.sort().items() for key, q in self._listeners.items()}

    def snapshot(self, key: str) -> tuple[ListenerEntry, ...] | None:
        """Sort the queue for *key* and return a copy of its entries.

        Returns:
            Entries in descending priority order, or None if nothing is
            registered under key.
        """
        with self._lock:
            queue = self._listeners.get(key)
            if queue is None:
                return None
            return queue.sort().items()

    def remove_listener(self, name: str | None, listener: Handler | None) -> None:
        """Remove *listener* by identity.

        Supports two modes:
        - (name, listener): Remove listener from that name's queue only.
        - ("" or None, listener): Remove listener from every queue.

        Queues left empty are dropped together with their listened name.
        A ``None`` listener is a no-op.
        """
        if listener is None:
            return
        with self._lock:
            keys = [name] if name else list(self._listeners)
            for key in keys:
                queue = self._listeners.get(key)
                if queue is None:
                    continue
                queue.remove(listener)
                if queue.is_empty():
                    self._drop(key)
        log.debug("Removed listener {!r} from {}", listener, name or "all names")

    def remove_listeners(self, name: str) -> None:
        """Clear and delete the whole queue registered under *name*."""
        with self._lock:
            queue = self._listeners.get(name)
            if queue is None:
                return
            queue.clear()
            self._drop(name)
        log.debug("Removed all listeners of '{}'", name)

    def _drop(self, key: str) -> None:
        del self._listeners[key]
        self._listened_names.discard(key)

    # -- event prototypes -----------------------------------------------------

    def add_event(self, event: Event) -> None:
        """Register a prototype event, keyed by its (validated) name.

        An existing prototype with the same name is replaced.  Surrounding
        whitespace is trimmed from the event name.

        Raises:
            InvalidEventNameError: If the event name is invalid.
        """
        name = check_name(event.name)
        event.set_name(name)
        with self._lock:
            self._events[name] = event

    def get_event(self, name: str) -> Event | None:
        with self._lock:
            return self._events.get(name)

    def has_event(self, name: str) -> bool:
        with self._lock:
            return name in self._events

    def remove_event(self, name: str) -> None:
        with self._lock:
            self._events.pop(name, None)

    def remove_events(self) -> None:
        with self._lock:
            self._events = {}

    def resolve_event(self, name: str, data: dict[str, Any] | None) -> Event:
        """Return the event instance to dispatch for *name*.

        A registered prototype is reused with *data* merged into it;
        otherwise a fresh :attr:`sample` instance is built.
        """
        with self._lock:
            prototype = self._events.get(name)
        if prototype is not None:
            return prototype.merge_data(data)
        return self.new_event(name, data)

    def new_event(self, name: str, data: dict[str, Any] | None = None) -> Event:
        """Build a fresh :attr:`sample` event named *name*."""
        return self.sample(name=name, data=dict(data) if data else {})

    # -- lifecycle ------------------------------------------------------------

    def reset(self) -> None:
        """Drop all listeners, listened names, prototypes and the name.

        The registry stays usable afterwards.
        """
        with self._lock:
            for queue in self._listeners.values():
                queue.clear()
            self.name = ""
            self._events = {}
            self._listeners = {}
            self._listened_names = set()
        log.debug("Registry reset")

