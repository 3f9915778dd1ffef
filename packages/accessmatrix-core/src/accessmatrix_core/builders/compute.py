"""Compute Engine subnetwork and instance bindings."""

from __future__ import annotations

from typing import Any

from accessmatrix_core.builders.base import BaseIamBuilder
from accessmatrix_core.interfaces.resource import InstanceInfo, SubnetworkInfo
from accessmatrix_core.resources import types
from accessmatrix_core.resources.handlers import InstanceHandler, SubnetworkHandler


class SubnetworkIamBuilder(BaseIamBuilder):
    resource_type = types.SUBNETWORK
    binding_kind = "gcp:compute/subnetworkIAMMember:SubnetworkIAMMember"
    handler_class = SubnetworkHandler

    def binding_args(self, info: SubnetworkInfo) -> dict[str, Any]:
        return {"project": info.project, "region": info.region, "subnetwork": info.subnetwork}


class InstanceIamBuilder(BaseIamBuilder):
    resource_type = types.INSTANCE
    binding_kind = "gcp:compute/instanceIAMMember:InstanceIAMMember"
    handler_class = InstanceHandler

    def binding_args(self, info: InstanceInfo) -> dict[str, Any]:
        return {"instance_name": info.instance_name, "zone": info.zone, "project": info.project}
