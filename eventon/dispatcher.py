"""Dispatcher for named events.

The Dispatcher resolves which listener queues apply to a published name
and runs them, most specific first:

1. the exact name (``"app.user.login"``)
2. the group wildcard of its last segment (``"app.user.*"``)
3. the global wildcard (``"*"``)

Within a queue listeners run by descending priority.  A listener that
raises stops the whole publish and the exception reaches the caller; a
listener that calls ``event.abort()`` stops it silently.
"""

import asyncio
import threading
from collections.abc import Callable, Iterator, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager, nullcontext
from typing import Any, Self

from loguru import logger

from eventon._types import Handler, Subscriber
from eventon.config import DispatcherConfig
from eventon.event import Event
from eventon.exceptions import (
    ConfigurationError,
    DispatcherShutdownError,
    EventValidationError,
    FatalPublishError,
)
from eventon.listener import ListenerEntry, Priority, invoke
from eventon.registry import Registry
from eventon.utils import WILDCARD, check_name, group_pattern

log = logger.bind(source=__name__)


class Dispatcher:
    """Publish/subscribe dispatcher.

    Registration may happen from any thread while publishes are in
    flight; a publish that is already resolving queues may or may not see
    a listener added concurrently.

    Publish forms:
    - :meth:`publish` / :meth:`publish_event`: synchronous, exceptions
      propagate.
    - :meth:`must_publish`: synchronous, failures escalate to
      :class:`FatalPublishError`.
    - :meth:`publish_async`: fire-and-forget on the worker pool; failures
      are logged and dropped.
    - :meth:`publish_await` / :meth:`apublish`: run on the worker pool and
      wait for the result.
    - :meth:`publish_batch`: publish several events, collecting failures.
    """

    def __init__(
        self,
        name: str = "default",
        *,
        enable_lock: bool = False,
        max_workers: int | None = None,
        thread_name_prefix: str = "eventon",
        sample: type[Event] = Event,
    ) -> None:
        """Initialize dispatcher.

        Args:
            name: Dispatcher name, used in logs.
            enable_lock: Allow at most one publish at a time.
            max_workers: Worker pool size for async publishes.
            thread_name_prefix: Prefix of worker thread names.
            sample: Event class built for names without a prototype.

        Post:
            Registry empty, worker pool not started, not shut down.
        """
        self.enable_lock = enable_lock
        self._registry = Registry(name, sample)
        # Re-entrant so listeners can publish nested events
        self._publish_lock = threading.RLock()
        self._max_workers = max_workers
        self._thread_name_prefix = thread_name_prefix
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()
        self._is_shutting_down = False

    @classmethod
    def from_config(cls, config: DispatcherConfig) -> Self:
        """Build a dispatcher from ``[tool.eventon]`` settings."""
        return cls(
            config.name,
            enable_lock=config.enable_lock,
            max_workers=config.max_workers,
            thread_name_prefix=config.thread_name_prefix,
        )

    @property
    def name(self) -> str:
        return self._registry.name

    @property
    def registry(self) -> Registry:
        return self._registry

    # -- registration ---------------------------------------------------------

    def listen(
        self, name: str, listener: Handler, priority: int = Priority.NORMAL
    ) -> None:
        """Register *listener* on an event name, group pattern or ``*``.

        Raises:
            InvalidEventNameError: If name is not a valid key.
            InvalidListenerError: If listener is None or cannot be invoked.
        """
        self._registry.listen(name, listener, priority)

    def add_listener(self, name: str, entry: ListenerEntry) -> None:
        self._registry.add_listener(name, entry)

    def on[F: Callable[..., Any]](
        self,
        *names: str,
        priority: int = Priority.NORMAL,
    ) -> Callable[[F], F]:
        """Decorator to register a function as listener.

        Args:
            names: Event names or patterns to listen on.
            priority: Priority value (higher = executed first).

        Returns:
            Decorator function that returns the original function unchanged.

        Raises:
            ConfigurationError: If no name is given.
        """
        if not names:
            raise ConfigurationError("must provide at least one event name")

        def decorator(func: F) -> F:
            for name in names:
                self.listen(name, func, priority)
            return func

        return decorator

    def subscribe(self, subscriber: Subscriber) -> None:
        """Register all listeners declared by *subscriber*.

        Raises:
            InvalidSubscriberError: If a subscription has an unknown shape.
        """
        self._registry.subscribe(subscriber)

    def add_event(self, event: Event) -> None:
        """Register a prototype reused whenever its name is published."""
        self._registry.add_event(event)

    def get_event(self, name: str) -> Event | None:
        return self._registry.get_event(name)

    def has_event(self, name: str) -> bool:
        return self._registry.has_event(name)

    def remove_event(self, name: str) -> None:
        self._registry.remove_event(name)

    def remove_events(self) -> None:
        self._registry.remove_events()

    # -- queries --------------------------------------------------------------

    def has_listeners(self, name: str) -> bool:
        return self._registry.has_listeners(name)

    def listener_count(self, name: str) -> int:
        return self._registry.listener_count(name)

    def listened_names(self) -> list[str]:
        return self._registry.listened_names()

    def listeners_for(self, name: str) -> tuple[ListenerEntry, ...]:
        return self._registry.listeners_for(name)

    def listeners(self) -> dict[str, tuple[ListenerEntry, ...]]:
        return self._registry.listeners()

    # -- removal --------------------------------------------------------------

    def remove_listener(self, name: str | None, listener: Handler | None) -> None:
        """Remove *listener* from *name*, or from every name if name is empty."""
        self._registry.remove_listener(name, listener)

    def remove_listeners(self, name: str) -> None:
        self._registry.remove_listeners(name)

    def reset(self) -> None:
        """Forget all listeners, prototypes and the dispatcher name."""
        self._registry.reset()

    # -- publishing -----------------------------------------------------------

    def publish(self, name: str, data: dict[str, Any] | None = None) -> Event:
        """Synchronously publish an event by name.

        Publishing a name nobody listens to is not an error: a fresh event
        is returned and no listener runs.

        Args:
            name: Event name.
            data: Values merged into the event's data bag.

        Returns:
            The dispatched event (the registered prototype, if any).

        Raises:
            InvalidEventNameError: If name is invalid.
            EventValidationError: If data is not a mapping or the event
                class rejects it.
            DispatcherShutdownError: If the dispatcher is shut down.
            Exception: Whatever the first failing listener raised.
        """
        self._check_running()
        name = check_name(name)
        if data is not None and not isinstance(data, Mapping):
            raise EventValidationError(
                f"event data must be a mapping, got {type(data).__name__}"
            )
        with self._locked():
            if not self._has_candidates(name):
                log.debug("No listeners for '{}'", name)
                return self._registry.new_event(name, data)
            event = self._registry.resolve_event(name, data)
            return self._dispatch(event, name)

    def publish_event(self, event: Event) -> Event:
        """Synchronously publish a pre-built event.

        Raises:
            InvalidEventNameError: If the event name is invalid.
            DispatcherShutdownError: If the dispatcher is shut down.
            Exception: Whatever the first failing listener raised.
        """
        self._check_running()
        return self._publish_event(event)

    def must_publish(self, name: str, data: dict[str, Any] | None = None) -> Event:
        """Publish by name, escalating a listener failure.

        Raises:
            FatalPublishError: If a listener raised; the listener's
                exception is chained as ``__cause__``.
            InvalidEventNameError: If name is invalid.
            EventValidationError: If data cannot build a valid event.
            DispatcherShutdownError: If the dispatcher is shut down.
        """
        self._check_running()
        name = check_name(name)
        try:
            return self.publish(name, data)
        except (ConfigurationError, EventValidationError):
            raise
        except Exception as exc:
            raise FatalPublishError(f"publish of '{name}' failed: {exc!r}") from exc

    def publish_async(self, event: Event) -> Future[None]:
        """Fire-and-forget publish on the worker pool.

        Listener failures are logged and dropped; the returned future
        always resolves to None.  There is no queue bound.

        Raises:
            InvalidEventNameError: If the event name is invalid.
            DispatcherShutdownError: If the dispatcher is shut down.
        """
        self._check_running()
        check_name(event.name)
        return self._submit(self._publish_quietly, event)

    def publish_await(self, event: Event) -> Event:
        """Publish on the worker pool and block until it completes.

        Warning:
            Calling this from a worker thread of the same dispatcher can
            deadlock when every worker is busy waiting.

        Raises:
            InvalidEventNameError: If the event name is invalid.
            DispatcherShutdownError: If the dispatcher is shut down.
            Exception: Whatever the first failing listener raised.
        """
        self._check_running()
        check_name(event.name)
        future = self._submit(self._publish_event, event)
        return future.result()

    async def apublish(self, event: Event) -> Event:
        """Publish on the worker pool and await completion from asyncio.

        The event loop is not blocked while listeners run.

        Raises:
            InvalidEventNameError: If the event name is invalid.
            DispatcherShutdownError: If the dispatcher is shut down.
            Exception: Whatever the first failing listener raised.
        """
        self._check_running()
        check_name(event.name)
        return await asyncio.wrap_future(self._submit(self._publish_event, event))

    def publish_batch(self, *items: str | Event) -> list[Exception]:
        """Publish several events in order, collecting listener failures.

        Every item is validated before anything is published.  A failing
        item does not stop the ones after it.

        Args:
            items: Event names (published without data) or Event instances.

        Returns:
            Exceptions raised by listeners, in item order; empty on success.

        Raises:
            TypeError: If an item is neither a str nor an Event.
            InvalidEventNameError: If an item name is invalid.
        """
        self._check_running()
        for item in items:
            match item:
                case str():
                    check_name(item)
                case Event():
                    check_name(item.name)
                case _:
                    raise TypeError(
                        f"batch items must be str or Event, got {type(item).__name__}"
                    )

        errors: list[Exception] = []
        for item in items:
            try:
                if isinstance(item, str):
                    self.publish(item)
                else:
                    self.publish_event(item)
            except Exception as exc:
                errors.append(exc)
        if errors:
            log.debug("Batch publish finished with {} error(s)", len(errors))
        return errors

    # -- lifecycle ------------------------------------------------------------

    def shutdown(self, wait: bool = True) -> None:
        """Gracefully shut down dispatcher.

        Idempotent: repeated calls are safe.

        Args:
            wait: Block until queued async publishes finish.

        Post:
            _is_shutting_down == True.
            Subsequent publish calls will raise DispatcherShutdownError.
        """
        with self._executor_lock:
            self._is_shutting_down = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
        log.debug("Dispatcher '{}' shut down", self.name)

    # -- internals ------------------------------------------------------------

    def _check_running(self) -> None:
        if self._is_shutting_down:
            raise DispatcherShutdownError(f"Dispatcher '{self.name}' is shut down")

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._publish_lock if self.enable_lock else nullcontext():
            yield

    def _has_candidates(self, name: str) -> bool:
        """Cheap check whether any queue could match *name*."""
        registry = self._registry
        if registry.has_listeners(name) or registry.has_listeners(WILDCARD):
            return True
        group = group_pattern(name)
        return group is not None and registry.has_listeners(group)

    def _dispatch(self, event: Event, name: str) -> Event:
        """Run the exact, group and global phases for *event*.

        Args:
            event: Event to dispatch.
            name: Validated event name.

        Returns:
            The same event.

        Raises:
            Exception: Whatever the first failing listener raised.
        """
        event.abort(False)
        keys = [name]
        if (group := group_pattern(name)) is not None:
            keys.append(group)
        keys.append(WILDCARD)
        log.debug("Publish '{}' (keys={})", name, keys)

        for key in keys:
            entries = self._registry.snapshot(key)
            if entries is None:
                continue
            for entry in entries:
                try:
                    invoke(entry.listener, event)
                except Exception:
                    log.debug("Listener {} failed on '{}'", entry.name, name)
                    raise
                if event.aborted:
                    log.debug("Listener {} aborted '{}'", entry.name, name)
                    return event
        return event

    def _publish_event(self, event: Event) -> Event:
        # No shutdown check: tasks queued before shutdown() still run
        name = check_name(event.name)
        event.set_name(name)
        with self._locked():
            return self._dispatch(event, name)

    def _publish_quietly(self, event: Event) -> None:
        try:
            self._publish_event(event)
        except Exception:
            log.exception("Async publish of '{}' failed", event.name)

    def _submit[T](self, fn: Callable[[Event], T], event: Event) -> Future[T]:
        # Submit under the lock: shutdown() cannot close the pool in between
        with self._executor_lock:
            self._check_running()
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix=self._thread_name_prefix,
                )
            return self._executor.submit(fn, event)
