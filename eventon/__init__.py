"""eventon - In-process publish/subscribe dispatcher for named events.

Listeners are registered on event names, group patterns (``"app.*"``) or
the global wildcard (``"*"``) with a priority, and run synchronously or on
a worker pool when an event is published.
"""

__version__ = "0.1.0"

from loguru import logger

# Disable all eventon logging by default.  Users opt in with:
#     from loguru import logger
#     logger.enable("eventon")
logger.disable("eventon")

from eventon._types import Handler, Listener, Subscriber
from eventon.config import DispatcherConfig, load_config
from eventon.default import (
    add_event,
    get_default_dispatcher,
    has_listeners,
    listen,
    must_publish,
    on,
    publish,
    publish_async,
    publish_await,
    publish_batch,
    remove_listener,
    remove_listeners,
    reset,
    set_default_dispatcher,
    subscribe,
)
from eventon.dispatcher import Dispatcher
from eventon.event import Event
from eventon.exceptions import (
    ConfigError,
    ConfigurationError,
    DispatcherShutdownError,
    EventonError,
    EventValidationError,
    FatalPublishError,
    InvalidEventNameError,
    InvalidListenerError,
    InvalidSubscriberError,
)
from eventon.listener import ListenerEntry, ListenerQueue, Priority
from eventon.registry import Registry
from eventon.utils import WILDCARD

__all__ = [
    # Version
    "__version__",
    # Core classes
    "Event",
    "Dispatcher",
    "Registry",
    "ListenerEntry",
    "ListenerQueue",
    "Priority",
    "WILDCARD",
    # Protocols
    "Handler",
    "Listener",
    "Subscriber",
    # Configuration
    "DispatcherConfig",
    "load_config",
    # Default dispatcher
    "get_default_dispatcher",
    "set_default_dispatcher",
    "listen",
    "on",
    "subscribe",
    "add_event",
    "has_listeners",
    "publish",
    "must_publish",
    "publish_async",
    "publish_await",
    "publish_batch",
    "remove_listener",
    "remove_listeners",
    "reset",
    # Exception classes
    "EventonError",
    "ConfigurationError",
    "ConfigError",
    "EventValidationError",
    "InvalidEventNameError",
    "InvalidListenerError",
    "InvalidSubscriberError",
    "FatalPublishError",
    "DispatcherShutdownError",
]
