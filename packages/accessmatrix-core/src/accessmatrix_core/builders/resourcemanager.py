"""Project, folder and service-account bindings."""

from __future__ import annotations

from typing import Any

from accessmatrix_core.builders.base import BaseIamBuilder
from accessmatrix_core.interfaces.resource import FolderInfo, ProjectInfo, ServiceAccountInfo
from accessmatrix_core.resources import types
from accessmatrix_core.resources.handlers import (
    FolderHandler,
    ProjectHandler,
    ServiceAccountHandler,
)


class ProjectIamBuilder(BaseIamBuilder):
    resource_type = types.PROJECT
    binding_kind = "gcp:projects/iAMMember:IAMMember"
    handler_class = ProjectHandler

    def binding_args(self, info: ProjectInfo) -> dict[str, Any]:
        return {"project": info.project_id}


class FolderIamBuilder(BaseIamBuilder):
    resource_type = types.FOLDER
    binding_kind = "gcp:folder/iAMMember:IAMMember"
    handler_class = FolderHandler

    def binding_args(self, info: FolderInfo) -> dict[str, Any]:
        return {"folder": info.folder}


class ServiceAccountIamBuilder(BaseIamBuilder):
    resource_type = types.SERVICE_ACCOUNT
    binding_kind = "gcp:serviceaccount/iAMMember:IAMMember"
    handler_class = ServiceAccountHandler

    def binding_args(self, info: ServiceAccountInfo) -> dict[str, Any]:
        return {"service_account_id": info.service_account_id}
