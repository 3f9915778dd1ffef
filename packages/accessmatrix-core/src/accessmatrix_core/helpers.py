"""Shape-sniffing helpers for loosely typed resource and principal values.

Values reaching the engine are either mappings (parsed from YAML/JSON) or
arbitrary objects from a component library. These helpers read both the
same way.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# Attribute (or mapping key) carrying a provider resource's canonical type token.
TYPE_TAG = "type_token"


def has_method(value: object, name: str) -> bool:
    """True when *value* exposes a callable attribute called *name*."""
    if value is None or isinstance(value, (str, Mapping)):
        return False
    return callable(getattr(value, name, None))


def has_field(value: object, name: str) -> bool:
    """True when *value* carries a non-None field (mapping key or attribute)."""
    return read_field(value, name) is not None


def read_field(value: object, *names: str) -> Any:
    """Return the first non-None field among *names*, or None."""
    if value is None or isinstance(value, str):
        return None
    for name in names:
        if isinstance(value, Mapping):
            found = value.get(name)
        else:
            found = getattr(value, name, None)
        if found is not None and not callable(found):
            return found
    return None


def read_str(value: object, *names: str) -> str | None:
    """Like :func:`read_field` but only accepts non-empty plain strings."""
    for name in names:
        found = read_field(value, name)
        if isinstance(found, str) and found:
            return found
    return None


def call_method(value: object, name: str) -> Any:
    """Call the zero-argument method *name* on *value*."""
    return getattr(value, name)()


def type_tag(value: object) -> str | None:
    """The canonical type token carried by *value*, if any."""
    return read_str(value, TYPE_TAG)


def describe(value: object, limit: int = 100) -> str:
    """Short printable description of *value* for error messages."""
    text = repr(value)
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return text
