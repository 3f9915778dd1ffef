"""Deferred values: plan-time placeholders resolved later by the deployment engine.

The engine only composes transforms over a :class:`Deferred`; it never calls
:meth:`Deferred.result`. That call belongs to whoever executes the plan (the
CLI's ``--resolve`` mode, or a test).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")

_UNSET: Any = object()


class Deferred(Generic[T]):
    """A lazily evaluated value with ``apply``/``map`` composition.

    ``identifier_hint`` and ``resources`` carry naming hints about the
    value's origin; they survive ``apply`` so derived values keep them.
    """

    __slots__ = ("_thunk", "_value", "_error", "identifier_hint", "resources")

    def __init__(
        self,
        thunk: Callable[[], T],
        *,
        identifier_hint: str | None = None,
        resources: Sequence[Any] = (),
    ) -> None:
        self._thunk = thunk
        self._value: Any = _UNSET
        self._error: BaseException | None = None
        self.identifier_hint = identifier_hint
        self.resources = tuple(resources)

    @classmethod
    def of(cls, value: T, **hints: Any) -> Deferred[T]:
        """Wrap an already-known value."""
        return cls(lambda: value, **hints)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def apply(self, fn: Callable[[T], U]) -> Deferred[U]:
        """Return a new deferred value computing ``fn(self)`` on resolution."""
        return Deferred(
            lambda: fn(self.result()),
            identifier_hint=self.identifier_hint,
            resources=self.resources,
        )

    map = apply

    def with_hint(self, identifier: str) -> Deferred[T]:
        """Return a view of this value carrying an explicit identifier hint."""
        return Deferred(self.result, identifier_hint=identifier, resources=self.resources)

    @staticmethod
    def all(*values: Any) -> Deferred[list[Any]]:
        """Combine plain and deferred values into one deferred list."""
        resources: list[Any] = []
        for v in values:
            if isinstance(v, Deferred):
                resources.extend(v.resources)
        return Deferred(lambda: [resolve_value(v) for v in values], resources=resources)

    @staticmethod
    def format(template: str, *values: Any) -> Deferred[str]:
        """Interpolate plain or deferred *values* into *template* (``str.format``)."""
        return Deferred.all(*values).apply(lambda parts: template.format(*parts))

    # ------------------------------------------------------------------
    # Resolution (deployment-engine side)
    # ------------------------------------------------------------------

    @property
    def is_resolved(self) -> bool:
        return self._value is not _UNSET

    def result(self) -> T:
        """Evaluate the value once; later calls return (or re-raise) the same outcome."""
        if self._error is not None:
            raise self._error
        if self._value is _UNSET:
            try:
                self._value = self._thunk()
            except Exception as exc:
                self._error = exc
                raise
        return self._value

    def __repr__(self) -> str:
        state = repr(self._value) if self.is_resolved else "pending"
        return f"Deferred({state})"


# A value that may or may not be known at plan time.
Input = Union[T, Deferred[T]]


def is_deferred(value: object) -> bool:
    return isinstance(value, Deferred)


def resolve_value(value: Any) -> Any:
    """Return the concrete value behind *value*, resolving it if deferred."""
    if isinstance(value, Deferred):
        return value.result()
    return value
