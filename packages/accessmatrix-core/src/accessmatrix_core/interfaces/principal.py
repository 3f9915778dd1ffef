"""Principal resolver interface and the resolved-principal record."""

from __future__ import annotations

from typing import Any, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict

from accessmatrix_core.deferred import Deferred


class ResolvedPrincipal(BaseModel):
    """A membership string (possibly deferred) plus a concrete identifier.

    The identifier may be empty (`"user:"`); binding names then fall back
    to `principal-{index}`.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    member: Union[str, Deferred]
    identifier: str


@runtime_checkable
class PrincipalResolver(Protocol):
    """One variant in the principal resolver chain."""

    def can_resolve(self, principal: Any) -> bool: ...

    def resolve(self, principal: Any, principal_index: int) -> ResolvedPrincipal: ...
