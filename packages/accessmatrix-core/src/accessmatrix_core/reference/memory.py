"""In-memory stack backend, used for tests and for embedding the engine."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from accessmatrix_core.deferred import Deferred
from accessmatrix_core.errors import StackNotFoundError


class StaticStackHandle:
    """Handle whose outputs come from a mapping owned by its backend."""

    def __init__(self, name: str, stack: str, backend: InMemoryStackBackend) -> None:
        self.name = name
        self.stack = stack
        self._backend = backend

    def outputs(self) -> Deferred[dict[str, Any]]:
        return Deferred(lambda: self._backend.read(self.stack))

    def get_output(self, key: str) -> Deferred[Any]:
        return self.outputs().apply(lambda outputs: outputs.get(key))

    def __repr__(self) -> str:
        return f"StaticStackHandle({self.name!r})"


class InMemoryStackBackend:
    """Serves stack outputs from a ``{"org/project/env": {...}}`` mapping."""

    def __init__(self, stacks: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._stacks: dict[str, dict[str, Any]] = {
            k: dict(v) for k, v in (stacks or {}).items()
        }
        self.opened: list[str] = []

    def set_outputs(self, stack: str, outputs: Mapping[str, Any]) -> None:
        self._stacks[stack] = dict(outputs)

    def read(self, stack: str) -> dict[str, Any]:
        if stack not in self._stacks:
            raise StackNotFoundError(stack)
        return copy.deepcopy(self._stacks[stack])

    def open(self, name: str, stack: str) -> StaticStackHandle:
        self.opened.append(name)
        return StaticStackHandle(name, stack, self)
