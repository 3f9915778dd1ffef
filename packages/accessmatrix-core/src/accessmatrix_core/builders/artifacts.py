"""Artifact Registry repository bindings."""

from __future__ import annotations

from typing import Any

from accessmatrix_core.builders.base import BaseIamBuilder
from accessmatrix_core.interfaces.resource import RepositoryInfo
from accessmatrix_core.resources import types
from accessmatrix_core.resources.handlers import RepositoryHandler


class RepositoryIamBuilder(BaseIamBuilder):
    resource_type = types.REPOSITORY
    binding_kind = "gcp:artifactregistry/repositoryIamMember:RepositoryIamMember"
    handler_class = RepositoryHandler

    def binding_args(self, info: RepositoryInfo) -> dict[str, Any]:
        return {
            "repository": info.repository,
            "location": info.location,
            "project": info.project,
        }
