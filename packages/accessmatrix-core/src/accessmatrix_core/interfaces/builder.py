"""IAM builder interface, binding parameters and the binding operation record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from accessmatrix_core.deferred import Deferred


@dataclass(frozen=True)
class IamBindingParams:
    """Inputs for one binding: the resource value, role, member and name."""

    resource: Any
    role: Any
    member: Any
    resource_name: str


class BindingOperation(BaseModel):
    """The unit of work handed to the deployment engine."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    kind: str
    resource_type: str
    role: Union[str, Deferred]
    member: Union[str, Deferred]
    args: dict[str, Any] = Field(default_factory=dict)


@runtime_checkable
class IamBuilder(Protocol):
    """Turns binding parameters for one resource type into a binding operation."""

    def build(self, params: IamBindingParams) -> BindingOperation: ...
