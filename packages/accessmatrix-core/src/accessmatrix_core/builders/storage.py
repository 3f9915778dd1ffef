"""Cloud Storage bucket bindings."""

from __future__ import annotations

from typing import Any

from accessmatrix_core.builders.base import BaseIamBuilder
from accessmatrix_core.interfaces.resource import BucketInfo
from accessmatrix_core.resources import types
from accessmatrix_core.resources.handlers import BucketHandler


class BucketIamBuilder(BaseIamBuilder):
    resource_type = types.BUCKET
    binding_kind = "gcp:storage/bucketIAMMember:BucketIAMMember"
    handler_class = BucketHandler

    def binding_args(self, info: BucketInfo) -> dict[str, Any]:
        return {"bucket": info.bucket}
