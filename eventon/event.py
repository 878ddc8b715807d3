"""Event model for eventon.

This module provides the Event payload: a named, mutable key/value bag
with an abort flag that listeners read and write during dispatch.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from eventon.exceptions import EventValidationError


class Event(BaseModel):
    """Named data bag passed through a publish call.

    Users may inherit from this class to pre-declare typed fields next to
    the free-form ``data`` bag.

    Example:
        >>> e = Event(name="user.login", data={"user_id": 123})
        >>> e.get("user_id")
        123
        >>> e.abort()
        >>> e.is_aborted
        True

    Attributes:
        name: Event name. Change it with :meth:`set_name`.
        data: Payload mapping; never None.
        aborted: Set by a listener to stop the remaining dispatch.

    Raises:
        EventValidationError: If fields fail pydantic validation.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    name: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    aborted: bool = False

    def __init__(self, **data: Any) -> None:
        """Wrap pydantic ValidationError into EventValidationError."""
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise EventValidationError(str(exc)) from exc

    @field_validator("data", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under *key*, or *default*."""
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any previous value."""
        self.data[key] = value

    def add(self, key: str, value: Any) -> None:
        """Store *value* under *key* only if the key is not present yet."""
        self.data.setdefault(key, value)

    def set_data(self, data: dict[str, Any] | None) -> "Event":
        """Replace the whole data bag; ``None`` leaves it untouched."""
        if data is not None:
            self._assign("data", data)
        return self

    def merge_data(self, data: dict[str, Any] | None) -> "Event":
        """Merge *data* into the bag; supplied keys overwrite existing ones."""
        if data:
            self.data.update(data)
        return self

    def set_name(self, name: str) -> "Event":
        self._assign("name", name)
        return self

    def abort(self, flag: bool = True) -> None:
        """Mark (or unmark) the event as aborted."""
        self.aborted = flag

    def _assign(self, field: str, value: Any) -> None:
        try:
            setattr(self, field, value)
        except ValidationError as exc:
            raise EventValidationError(str(exc)) from exc

    @property
    def is_aborted(self) -> bool:
        return self.aborted
