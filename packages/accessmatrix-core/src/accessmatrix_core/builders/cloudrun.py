"""Cloud Run v2 service and job bindings."""

from __future__ import annotations

from typing import Any

from accessmatrix_core.builders.base import BaseIamBuilder
from accessmatrix_core.interfaces.resource import CloudRunInfo
from accessmatrix_core.resources import types
from accessmatrix_core.resources.handlers import CloudRunHandler


class CloudRunServiceIamBuilder(BaseIamBuilder):
    resource_type = types.CLOUD_RUN_SERVICE
    binding_kind = "gcp:cloudrunv2/serviceIamMember:ServiceIamMember"
    handler_class = CloudRunHandler

    def binding_args(self, info: CloudRunInfo) -> dict[str, Any]:
        return {"project": info.project, "name": info.name, "location": info.location}


class CloudRunJobIamBuilder(CloudRunServiceIamBuilder):
    resource_type = types.CLOUD_RUN_JOB
    binding_kind = "gcp:cloudrunv2/jobIamMember:JobIamMember"
