"""Tests for the Event model.

Tests verify:
- Data bag accessors (get/set/add)
- set_data / merge_data semantics
- Abort flag
- pydantic validation wrapping
"""

import pytest

from eventon.event import Event
from eventon.exceptions import EventValidationError


class TestEventData:
    """Test the key/value bag."""

    def test_defaults(self):
        """A bare event has an empty name, empty data and is not aborted."""
        e = Event()
        assert e.name == ""
        assert e.data == {}
        assert e.aborted is False

    def test_none_data_becomes_empty_dict(self):
        """data=None is normalized to an empty mapping."""
        e = Event(name="n1", data=None)
        assert e.data == {}

    def test_get_set(self):
        """set() overwrites, get() falls back to the default."""
        e = Event(name="n1", data={"arg0": "val0"})
        assert e.get("arg0") == "val0"
        assert e.get("not-exist") is None
        assert e.get("not-exist", 5) == 5

        e.set("arg0", "new val")
        assert e.get("arg0") == "new val"

    def test_add_only_when_absent(self):
        """add() never overwrites an existing key."""
        e = Event(name="n1", data={"k": "v"})
        e.add("k", "other")
        e.add("k2", "v2")
        assert e.data == {"k": "v", "k2": "v2"}

    def test_set_data_replaces(self):
        """set_data() replaces the bag; None leaves it untouched."""
        e = Event(name="n1", data={"a": 1})
        assert e.set_data({"b": 2}) is e
        assert e.data == {"b": 2}

        e.set_data(None)
        assert e.data == {"b": 2}

    def test_merge_data_overwrites_supplied_keys(self):
        """merge_data() keeps unrelated keys and overwrites supplied ones."""
        e = Event(name="n1", data={"a": 1, "b": 1})
        e.merge_data({"b": 2, "c": 3})
        assert e.data == {"a": 1, "b": 2, "c": 3}

    def test_set_name(self):
        e = Event(name="n1")
        assert e.set_name("n2") is e
        assert e.name == "n2"


class TestEventAbort:
    """Test the abort flag."""

    def test_abort_and_reset(self):
        e = Event(name="n1")
        assert not e.is_aborted
        e.abort()
        assert e.is_aborted
        e.abort(False)
        assert not e.is_aborted


class TestEventValidation:
    """Test pydantic validation wrapping."""

    def test_unknown_field_rejected(self):
        """extra fields raise EventValidationError."""
        with pytest.raises(EventValidationError):
            Event(name="n1", target="x")  # type: ignore[call-arg]

    def test_bad_data_type_rejected(self):
        with pytest.raises(EventValidationError):
            Event(name="n1", data=["not", "a", "mapping"])  # type: ignore[arg-type]

    def test_subclass_with_typed_fields(self):
        """Subclasses can pre-declare typed fields."""

        class UserEvent(Event):
            user_id: int = 0

        e = UserEvent(name="user.login", user_id=7)
        assert e.user_id == 7
        assert e.data == {}

    def test_set_name_rejects_non_str(self):
        """Assignment errors are wrapped like construction errors."""
        e = Event(name="n1")
        with pytest.raises(EventValidationError):
            e.set_name(None)  # type: ignore[arg-type]
        assert e.name == "n1"

    def test_set_data_rejects_non_mapping(self):
        e = Event(name="n1", data={"k": "v"})
        with pytest.raises(EventValidationError):
            e.set_data(["not", "a", "mapping"])  # type: ignore[arg-type]
        assert e.data == {"k": "v"}
