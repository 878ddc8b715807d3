"""Tests for Registry.

Tests verify:
- add_listener()/listen() key validation and listened-name index
- subscribe() with every accepted subscription shape
- Query surface (has_listeners, listener_count, listened_names, listeners_for)
- remove_listener() in both modes and remove_listeners()
- Event prototypes
- reset()
"""

import threading

import pytest

from eventon.event import Event
from eventon.exceptions import (
    InvalidEventNameError,
    InvalidListenerError,
    InvalidSubscriberError,
)
from eventon.listener import ListenerEntry, Priority
from eventon.registry import Registry


def noop(event: Event) -> None:
    return None


def other(event: Event) -> None:
    return None


class TestAddListener:
    """Test registration and key validation."""

    @pytest.mark.parametrize(
        "name", ["n1", "app.user.login", "a-b_c.D9", "app.*", "*"]
    )
    def test_valid_keys(self, name):
        reg = Registry()
        reg.listen(name, noop)
        assert reg.has_listeners(name)
        assert reg.listener_count(name) == 1

    @pytest.mark.parametrize(
        "name", ["", "   ", "++df", "9lives", "a b", "*.x", "a*b", ".*"]
    )
    def test_invalid_keys(self, name):
        reg = Registry()
        with pytest.raises(InvalidEventNameError):
            reg.listen(name, noop)

    def test_name_is_trimmed(self):
        reg = Registry()
        reg.listen("  n1 ", noop)
        assert reg.has_listeners("n1")

    def test_none_listener_raises(self):
        reg = Registry()
        with pytest.raises(InvalidListenerError):
            reg.listen("name", None)  # type: ignore[arg-type]
        assert not reg.has_listeners("name")

    def test_default_priority_is_normal(self):
        reg = Registry()
        reg.listen("n1", noop)
        assert reg.listeners_for("n1")[0].priority == Priority.NORMAL

    def test_listeners_for_is_sorted(self):
        reg = Registry()
        reg.listen("n1", noop, Priority.LOW)
        reg.listen("n1", other, Priority.HIGH)
        assert [e.listener for e in reg.listeners_for("n1")] == [other, noop]

    def test_duplicates_allowed(self):
        reg = Registry()
        reg.listen("n1", noop)
        reg.listen("n1", noop)
        assert reg.listener_count("n1") == 2

    def test_has_listeners_does_not_expand_patterns(self):
        reg = Registry()
        reg.listen("app.*", noop)
        assert not reg.has_listeners("app.evt1")
        assert reg.listener_count("not-exist") == 0

    def test_listened_names_and_table(self):
        reg = Registry()
        reg.listen("b", noop)
        reg.listen("a.*", noop)
        reg.listen("*", other)
        assert reg.listened_names() == ["*", "a.*", "b"]
        assert set(reg.listeners()) == {"*", "a.*", "b"}


class _Subscriber:
    def __init__(self, events):
        self._events = events

    def subscribed_events(self):
        return self._events


class _Handler:
    def handle(self, event: Event) -> None:
        return None


class TestSubscribe:
    """Test bulk registration via subscribers."""

    def test_all_shapes(self):
        reg = Registry()
        handler = _Handler()
        reg.subscribe(
            _Subscriber(
                {
                    "e1": noop,
                    "e2": ListenerEntry(Priority.ABOVE_NORMAL, other),
                    "e3": handler,
                    "e4": (Priority.HIGH, noop),
                }
            )
        )
        assert reg.listened_names() == ["e1", "e2", "e3", "e4"]
        assert reg.listeners_for("e2")[0].priority == Priority.ABOVE_NORMAL
        assert reg.listeners_for("e3")[0].listener is handler
        assert reg.listeners_for("e4")[0].priority == Priority.HIGH

    @pytest.mark.parametrize("value", ["invalid", 42, None, (1, 2, 3)])
    def test_invalid_shape_raises(self, value):
        reg = Registry()
        with pytest.raises(InvalidSubscriberError):
            reg.subscribe(_Subscriber({"e1": value}))

    def test_pair_with_bad_listener_raises(self):
        reg = Registry()
        with pytest.raises(InvalidListenerError):
            reg.subscribe(_Subscriber({"e1": (0, None)}))

    def test_non_mapping_raises(self):
        reg = Registry()
        with pytest.raises(InvalidSubscriberError):
            reg.subscribe(_Subscriber([("e1", noop)]))


class TestRemoval:
    """Test remove_listener() and remove_listeners()."""

    def test_remove_from_one_name_keeps_others(self):
        reg = Registry()
        reg.listen("n1", noop)
        reg.listen("n1", other)
        reg.listen("n2", noop)

        reg.remove_listener("n1", noop)

        assert [e.listener for e in reg.listeners_for("n1")] == [other]
        assert reg.has_listeners("n2")

    def test_removing_last_listener_drops_name(self):
        reg = Registry()
        reg.listen("n1", noop)
        reg.remove_listener("n1", noop)
        assert not reg.has_listeners("n1")
        assert reg.listened_names() == []

    def test_remove_from_all_names(self):
        reg = Registry()
        reg.listen("n1", noop)
        reg.listen("app.*", noop)
        reg.listen("*", noop)
        reg.listen("*", other)

        reg.remove_listener("", noop)

        assert reg.listened_names() == ["*"]
        assert reg.listener_count("*") == 1

    def test_remove_none_is_noop(self):
        reg = Registry()
        reg.listen("n1", noop)
        reg.remove_listener("", None)
        reg.remove_listener("n1", None)
        assert reg.listener_count("n1") == 1

    def test_remove_unknown_name_is_noop(self):
        reg = Registry()
        reg.remove_listener("not-exist", noop)
        reg.remove_listeners("not-exist")
        assert reg.listened_names() == []

    def test_remove_listeners(self):
        reg = Registry()
        reg.listen("n1", noop)
        reg.listen("n1", other)
        reg.remove_listeners("n1")
        assert not reg.has_listeners("n1")
        assert reg.listener_count("n1") == 0


class TestEventPrototypes:
    """Test the prototype table."""

    def test_add_get_has_remove(self):
        reg = Registry()
        assert reg.get_event("evt1") is None

        e = Event(name="evt1", data={"k1": "inhere"})
        reg.add_event(e)
        reg.add_event(Event(name="evt2"))

        assert reg.has_event("evt1")
        assert reg.has_event("evt2")
        assert not reg.has_event("not-exist")
        assert reg.get_event("evt1") is e

        reg.remove_event("evt2")
        assert not reg.has_event("evt2")

        reg.remove_events()
        assert not reg.has_event("evt1")

    def test_add_overwrites(self):
        reg = Registry()
        reg.add_event(Event(name="evt1"))
        replacement = Event(name="evt1")
        reg.add_event(replacement)
        assert reg.get_event("evt1") is replacement

    def test_add_trims_event_name(self):
        reg = Registry()
        proto = Event(name=" evt1 ")
        reg.add_event(proto)
        assert reg.get_event("evt1") is proto
        assert proto.name == "evt1"

    @pytest.mark.parametrize("name", ["", "app.*", "*"])
    def test_add_invalid_name_raises(self, name):
        reg = Registry()
        with pytest.raises(InvalidEventNameError):
            reg.add_event(Event(name=name))

    def test_resolve_event_merges_into_prototype(self):
        reg = Registry()
        proto = Event(name="evt1", data={"a": 1, "b": 1})
        reg.add_event(proto)
        resolved = reg.resolve_event("evt1", {"b": 2})
        assert resolved is proto
        assert proto.data == {"a": 1, "b": 2}

    def test_resolve_event_builds_from_sample(self):
        class Sample(Event):
            source: str = "sample"

        reg = Registry(sample=Sample)
        data = {"k": "v"}
        e = reg.resolve_event("evt1", data)
        assert isinstance(e, Sample)
        assert e.name == "evt1"
        assert e.data == {"k": "v"}
        e.set("x", 1)
        assert data == {"k": "v"}


class TestReset:
    def test_reset_clears_everything(self):
        reg = Registry("test")
        reg.listen("n1", noop)
        reg.listen("*", noop)
        reg.add_event(Event(name="evt1"))

        reg.reset()

        assert reg.name == ""
        assert reg.listened_names() == []
        assert reg.listeners() == {}
        assert not reg.has_event("evt1")

        # still usable
        reg.listen("n1", noop)
        assert reg.has_listeners("n1")


class TestConcurrentRegistration:
    def test_parallel_listen_and_remove(self):
        """Concurrent mutation keeps the listened-name index consistent."""
        reg = Registry()
        handlers = [lambda e: None for _ in range(50)]

        def worker(idx: int) -> None:
            name = f"evt{idx % 5}"
            for h in handlers:
                reg.listen(name, h)
                reg.snapshot(name)
            for h in handlers:
                reg.remove_listener(name, h)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert reg.listened_names() == []
        assert reg.listeners() == {}
