"""Shared type definitions for eventon.

All type aliases use PEP 695 ``type`` statement syntax, so the forward
references to ``Event`` and ``ListenerEntry`` are only resolved by type
checkers.
"""

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from eventon.event import Event
    from eventon.listener import ListenerEntry


type EventData = dict[str, Any]
"""Key/value bag carried by an event."""


@runtime_checkable
class Listener(Protocol):
    """Object-style listener.

    A listener fails by raising; its return value is ignored.
    """

    def handle(self, event: "Event") -> Any: ...


type ListenerFunc = Callable[["Event"], Any]
"""Function-style listener."""

type Handler = Listener | ListenerFunc
"""Anything the dispatcher can invoke with an event."""

type Subscription = Handler | "ListenerEntry" | tuple[int, Handler]
"""Accepted values of a subscriber mapping."""


@runtime_checkable
class Subscriber(Protocol):
    """Bulk registration source for :meth:`Registry.subscribe`."""

    def subscribed_events(self) -> Mapping[str, Subscription]: ...
