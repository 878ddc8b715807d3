import re
from typing import Any

from eventon.exceptions import InvalidEventNameError

WILDCARD = "*"
"""Global wildcard: listeners on this key see every publish."""

GROUP_SUFFIX = "." + WILDCARD

_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_.-]*$")


def callable_name(cb: Any) -> str:
    """Return a human-readable name for a callable, safe for logging.

    Falls back through ``__qualname__``, ``__name__``, and ``repr()``
    so that ``functools.partial``, callable instances, and other exotic
    callables never raise ``AttributeError``.

    Args:
        cb: Any callable object.

    Returns:
        Display name string.
    """
    return (
        getattr(cb, "__qualname__", None) or getattr(cb, "__name__", None) or repr(cb)
    )


# ---------------------------------------------------------------------------
# Event names
# ---------------------------------------------------------------------------


def check_name(name: str) -> str:
    """Validate a plain event name.

    Args:
        name: Raw event name; surrounding whitespace is ignored.

    Returns:
        The trimmed name.

    Raises:
        InvalidEventNameError: If the name is empty or malformed.
    """
    if not isinstance(name, str):
        raise InvalidEventNameError(
            f"event name must be a str, got {type(name).__name__}"
        )
    name = name.strip()
    if not name:
        raise InvalidEventNameError("event name cannot be empty")
    if not _NAME_RE.match(name):
        raise InvalidEventNameError(
            f"invalid event name {name!r}, must match {_NAME_RE.pattern!r}"
        )
    return name


def check_pattern(name: str) -> str:
    """Validate a listener key: a name, a ``prefix.*`` group, or ``*``.

    Args:
        name: Raw listener key.

    Returns:
        The trimmed key.

    Raises:
        InvalidEventNameError: If the key is neither form.
    """
    if isinstance(name, str) and name.strip() == WILDCARD:
        return WILDCARD
    if isinstance(name, str) and name.strip().endswith(GROUP_SUFFIX):
        prefix = name.strip()[: -len(GROUP_SUFFIX)]
        return check_name(prefix) + GROUP_SUFFIX
    return check_name(name)


def group_pattern(name: str) -> str | None:
    """Derive the group wildcard that covers *name*.

    ``"aa.bb.cc"`` maps to ``"aa.bb.*"``.  Names without a dot, or whose
    last dot is the final character, have no group.

    Args:
        name: Validated event name.

    Returns:
        Group pattern, or None.
    """
    pos = name.rfind(".")
    if pos < 0 or pos == len(name) - 1:
        return None
    return name[: pos + 1] + WILDCARD
