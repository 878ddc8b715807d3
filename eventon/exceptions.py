"""Exception hierarchy for eventon.

All custom exceptions inherit from EventonError base class.
"""


class EventonError(Exception):
    """Base exception for all eventon errors.

    All custom exceptions in the eventon framework inherit from this class,
    allowing users to catch all framework-specific errors with a single except clause.
    """


# -- Configuration errors -----------------------------------------------------


class ConfigurationError(EventonError, ValueError):
    """Listener or event set-up is invalid.

    Raised at the offending call (registration, publish, prototype
    registration) and never recovered by the dispatch algorithm.
    """


class EventValidationError(EventonError, ValueError):
    """Event validation failed.

    Raised when user-provided event fields fail pydantic validation.

    This wraps pydantic.ValidationError to provide a framework-specific exception type.
    """


class InvalidEventNameError(ConfigurationError):
    """Event name or pattern failed validation.

    Raised when:
    - The name is empty after trimming surrounding whitespace
    - The name does not match ``^[A-Za-z][A-Za-z0-9_.-]*$``
    - A wildcard pattern is used where a plain event name is required
    """


class InvalidListenerError(ConfigurationError, TypeError):
    """Listener is ``None`` or neither callable nor exposes ``handle()``."""


class InvalidSubscriberError(ConfigurationError, TypeError):
    """Subscriber mapping holds a value that is not a listener shape.

    Accepted values are a listener, a :class:`~eventon.listener.ListenerEntry`
    or a ``(priority, listener)`` tuple.
    """


class ConfigError(EventonError, ValueError):
    """The ``[tool.eventon]`` table failed validation.

    This wraps pydantic.ValidationError to provide a framework-specific exception type.
    """


# -- Publish errors -----------------------------------------------------------


class FatalPublishError(EventonError):
    """A listener failed during ``must_publish()``.

    The listener's exception is chained via ``__cause__``.
    """


class DispatcherShutdownError(EventonError, RuntimeError):
    """Publish attempted on a dispatcher after ``shutdown()``."""

