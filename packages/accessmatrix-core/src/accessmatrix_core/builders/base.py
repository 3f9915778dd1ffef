"""Common builder behaviour: extract with the matching handler, then emit."""

from __future__ import annotations

from typing import Any, ClassVar

from accessmatrix_core.interfaces.builder import BindingOperation, IamBindingParams
from accessmatrix_core.interfaces.resource import ResourceInfo
from accessmatrix_core.resources.handlers import BaseResourceHandler


def member_class(kind: str) -> str:
    """``gcp:storage/bucketIAMMember:BucketIAMMember`` -> ``BucketIAMMember``."""
    return kind.rsplit(":", 1)[-1]


class BaseIamBuilder:
    """Builds one binding kind for one resource type.

    Subclasses set ``resource_type``, ``binding_kind`` and ``handler_class``
    and implement :meth:`binding_args`.
    """

    resource_type: str = ""
    binding_kind: ClassVar[str] = ""
    handler_class: ClassVar[type[BaseResourceHandler]] = BaseResourceHandler

    def __init__(self, resource_type: str | None = None) -> None:
        if resource_type is not None:
            self.resource_type = resource_type
        self.handler = self.handler_class(self.resource_type)

    def build(self, params: IamBindingParams) -> BindingOperation:
        info = self.handler.extract_resource_info(
            params.resource, context=f"when creating {member_class(self.kind_for(None))}"
        )
        return BindingOperation(
            name=params.resource_name,
            kind=self.kind_for(info),
            resource_type=self.resource_type,
            role=params.role,
            member=params.member,
            args={k: v for k, v in self.binding_args(info).items() if v is not None},
        )

    def kind_for(self, info: ResourceInfo | None) -> str:
        return self.binding_kind

    def binding_args(self, info: Any) -> dict[str, Any]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.resource_type!r})"
