"""Deployment-engine surface for reading other stacks' recorded outputs."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from accessmatrix_core.deferred import Deferred


@runtime_checkable
class StackHandle(Protocol):
    """A handle on one remote stack's output graph."""

    name: str

    def get_output(self, key: str) -> Deferred[Any]: ...

    def outputs(self) -> Deferred[dict[str, Any]]: ...


@runtime_checkable
class StackBackend(Protocol):
    """Opens handles on remote stacks by their ``org/project/env`` name."""

    def open(self, name: str, stack: str) -> StackHandle: ...
