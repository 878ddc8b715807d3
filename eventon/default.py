"""Process-wide default dispatcher and module-level shortcuts.

The default dispatcher is created lazily on first use, under a lock, so
importing eventon has no side effects beyond loading modules.  Tests and
applications that need isolation should build their own
:class:`~eventon.dispatcher.Dispatcher` instead, or swap the default
with :func:`set_default_dispatcher`.
"""

import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any

from eventon._types import Handler, Subscriber
from eventon.dispatcher import Dispatcher
from eventon.event import Event
from eventon.listener import Priority

_lock = threading.Lock()
_default: Dispatcher | None = None


def get_default_dispatcher() -> Dispatcher:
    """Return the default dispatcher, creating it on first call."""
    global _default
    if _default is None:
        with _lock:
            if _default is None:
                _default = Dispatcher("default")
    return _default


def set_default_dispatcher(dispatcher: Dispatcher | None) -> Dispatcher | None:
    """Replace the default dispatcher.

    Passing None makes the next :func:`get_default_dispatcher` call build
    a fresh one.

    Returns:
        The previous default, if one was created.
    """
    global _default
    with _lock:
        previous, _default = _default, dispatcher
    return previous


def listen(name: str, listener: Handler, priority: int = Priority.NORMAL) -> None:
    get_default_dispatcher().listen(name, listener, priority)


def on[F: Callable[..., Any]](
    *names: str, priority: int = Priority.NORMAL
) -> Callable[[F], F]:
    return get_default_dispatcher().on(*names, priority=priority)


def subscribe(subscriber: Subscriber) -> None:
    get_default_dispatcher().subscribe(subscriber)


def add_event(event: Event) -> None:
    get_default_dispatcher().add_event(event)


def has_listeners(name: str) -> bool:
    return get_default_dispatcher().has_listeners(name)


def publish(name: str, data: dict[str, Any] | None = None) -> Event:
    return get_default_dispatcher().publish(name, data)


def must_publish(name: str, data: dict[str, Any] | None = None) -> Event:
    return get_default_dispatcher().must_publish(name, data)


def publish_async(event: Event) -> Future[None]:
    return get_default_dispatcher().publish_async(event)


def publish_await(event: Event) -> Event:
    return get_default_dispatcher().publish_await(event)


def publish_batch(*items: str | Event) -> list[Exception]:
    return get_default_dispatcher().publish_batch(*items)


def remove_listener(name: str | None, listener: Handler | None) -> None:
    get_default_dispatcher().remove_listener(name, listener)


def remove_listeners(name: str) -> None:
    get_default_dispatcher().remove_listeners(name)


def reset() -> None:
    get_default_dispatcher().reset()
