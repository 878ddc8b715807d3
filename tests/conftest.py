"""Shared test fixtures for all eventon tests."""

from collections.abc import Iterator

import pytest

from eventon import Dispatcher, Event, set_default_dispatcher


class Recorder:
    """Listener object that appends ``tag`` to a shared log."""

    def __init__(self, log: list[str], tag: str) -> None:
        self.log = log
        self.tag = tag

    def handle(self, event: Event) -> None:
        self.log.append(self.tag)


class Aborter:
    """Listener object that records itself and aborts the event."""

    def __init__(self, log: list[str], tag: str) -> None:
        self.log = log
        self.tag = tag

    def handle(self, event: Event) -> None:
        self.log.append(self.tag)
        event.abort()


class Boom(RuntimeError):
    """Error raised by failing test listeners."""


def failing(event: Event) -> None:
    raise Boom(f"failed on {event.name}")


@pytest.fixture
def dispatcher() -> Iterator[Dispatcher]:
    """Isolated dispatcher, shut down after the test."""
    d = Dispatcher("test")
    yield d
    d.shutdown()


@pytest.fixture
def calls() -> list[str]:
    """Shared call log for listeners."""
    return []


@pytest.fixture
def fresh_default() -> Iterator[Dispatcher]:
    """Install a fresh default dispatcher and restore the previous one."""
    d = Dispatcher("default")
    previous = set_default_dispatcher(d)
    yield d
    d.shutdown()
    set_default_dispatcher(previous)
