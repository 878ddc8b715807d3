"""Tests for eventon exception hierarchy.

Tests verify:
- Exception inheritance relationships
- Builtin bases so callers can catch ValueError/TypeError
"""

import pytest

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


class TestExceptionHierarchy:
    """Test exception class hierarchy and inheritance."""

    def test_eventon_error_is_base_exception(self):
        assert issubclass(EventonError, Exception)

    def test_configuration_errors(self):
        """Set-up errors are ConfigurationError and ValueError."""
        for cls in (
            InvalidEventNameError,
            InvalidListenerError,
            InvalidSubscriberError,
        ):
            assert issubclass(cls, ConfigurationError)
            assert issubclass(cls, ValueError)
        assert issubclass(ConfigurationError, EventonError)

    def test_listener_shape_errors_are_type_errors(self):
        assert issubclass(InvalidListenerError, TypeError)
        assert issubclass(InvalidSubscriberError, TypeError)
        assert not issubclass(InvalidEventNameError, TypeError)

    def test_validation_errors(self):
        assert issubclass(EventValidationError, EventonError)
        assert issubclass(EventValidationError, ValueError)
        assert issubclass(ConfigError, EventonError)
        assert issubclass(ConfigError, ValueError)

    def test_publish_errors(self):
        assert issubclass(FatalPublishError, EventonError)
        assert not issubclass(FatalPublishError, ConfigurationError)
        assert issubclass(DispatcherShutdownError, RuntimeError)


class TestExceptionRaising:
    """Test exceptions can be raised and caught."""

    def test_catch_all_with_base(self):
        with pytest.raises(EventonError) as exc_info:
            raise InvalidEventNameError("bad name")
        assert str(exc_info.value) == "bad name"

    def test_fatal_publish_chains_cause(self):
        with pytest.raises(FatalPublishError) as exc_info:
            try:
                raise RuntimeError("listener failed")
            except RuntimeError as exc:
                raise FatalPublishError("publish failed") from exc
        assert isinstance(exc_info.value.__cause__, RuntimeError)
