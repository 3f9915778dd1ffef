"""Secret Manager bindings: regional when the secret has a location, global otherwise."""

from __future__ import annotations

from typing import Any

from accessmatrix_core.builders.base import BaseIamBuilder
from accessmatrix_core.interfaces.resource import ResourceInfo, SecretInfo
from accessmatrix_core.resources import types
from accessmatrix_core.resources.handlers import SecretHandler

GLOBAL_SECRET_MEMBER = "gcp:secretmanager/secretIamMember:SecretIamMember"
REGIONAL_SECRET_MEMBER = "gcp:secretmanager/regionalSecretIamMember:RegionalSecretIamMember"


class SecretIamBuilder(BaseIamBuilder):
    resource_type = types.SECRET
    binding_kind = GLOBAL_SECRET_MEMBER
    handler_class = SecretHandler

    def kind_for(self, info: ResourceInfo | None) -> str:
        if isinstance(info, SecretInfo) and info.is_regional:
            return REGIONAL_SECRET_MEMBER
        return GLOBAL_SECRET_MEMBER

    def binding_args(self, info: SecretInfo) -> dict[str, Any]:
        if info.is_regional:
            return {
                "secret_id": info.secret_id,
                "location": info.location,
                "project": info.project,
            }
        return {"secret_id": info.secret_id}
