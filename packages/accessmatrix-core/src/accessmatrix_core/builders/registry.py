"""Resource type -> IAM builder dispatch."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from accessmatrix_core.builders.artifacts import RepositoryIamBuilder
from accessmatrix_core.builders.cloudrun import CloudRunJobIamBuilder, CloudRunServiceIamBuilder
from accessmatrix_core.builders.compute import InstanceIamBuilder, SubnetworkIamBuilder
from accessmatrix_core.builders.resourcemanager import (
    FolderIamBuilder,
    ProjectIamBuilder,
    ServiceAccountIamBuilder,
)
from accessmatrix_core.builders.secrets import SecretIamBuilder
from accessmatrix_core.builders.storage import BucketIamBuilder
from accessmatrix_core.errors import ConstructionError, InvalidBindingParamsError, NotSupportedError
from accessmatrix_core.interfaces.builder import BindingOperation, IamBindingParams, IamBuilder
from accessmatrix_core.resources import types

logger = logging.getLogger(__name__)

BuilderFactory = Callable[[], IamBuilder]

DEFAULT_BUILDERS: dict[str, BuilderFactory] = {
    types.BUCKET: BucketIamBuilder,
    types.CLOUD_RUN_SERVICE: CloudRunServiceIamBuilder,
    types.CLOUD_RUN_JOB: CloudRunJobIamBuilder,
    types.SECRET: SecretIamBuilder,
    types.REGIONAL_SECRET: lambda: SecretIamBuilder(types.REGIONAL_SECRET),
    types.INSTANCE: InstanceIamBuilder,
    types.SERVICE_ACCOUNT: ServiceAccountIamBuilder,
    types.REPOSITORY: RepositoryIamBuilder,
    types.PROJECT: ProjectIamBuilder,
    types.SUBNETWORK: SubnetworkIamBuilder,
    types.FOLDER: FolderIamBuilder,
}

# (params attribute, label used in the error message)
_REQUIRED_PARAMS = (
    ("resource", "Resource"),
    ("role", "Role"),
    ("member", "Member"),
    ("resource_name", "Resource name"),
)


class IamBuilderRegistry:
    """Registration table of builder factories plus a lazily filled instance cache."""

    def __init__(self, builders: Mapping[str, BuilderFactory] | None = None) -> None:
        self._factories: dict[str, BuilderFactory] = dict(builders or {})
        self._instances: dict[str, IamBuilder] = {}

    @classmethod
    def with_defaults(cls) -> IamBuilderRegistry:
        registry = cls()
        initialize_iam_builders(registry)
        return registry

    # -- Registration -------------------------------------------------------

    def register(self, resource_type: str, factory: BuilderFactory) -> None:
        self._factories[resource_type] = factory
        self._instances.pop(resource_type, None)

    def has_builder(self, resource_type: str) -> bool:
        return resource_type in self._factories

    def registered_types(self) -> list[str]:
        return list(self._factories)

    def clear_cache(self) -> None:
        self._instances.clear()

    def clear(self) -> None:
        self._factories.clear()
        self._instances.clear()

    @property
    def cache_size(self) -> int:
        return len(self._instances)

    # -- Lookup -------------------------------------------------------------

    def get_builder(self, resource_type: str) -> IamBuilder:
        if not resource_type or not isinstance(resource_type, str):
            raise ValueError("Resource type must be a non-empty string")

        cached = self._instances.get(resource_type)
        if cached is not None:
            return cached

        factory = self._factories.get(resource_type)
        if factory is None:
            raise NotSupportedError(resource_type, self.registered_types())

        try:
            builder = factory()
        except Exception as exc:
            raise ConstructionError(resource_type, exc) from exc
        self._instances[resource_type] = builder
        logger.debug("Created builder %r for %s", builder, resource_type)
        return builder

    def create_iam_binding(self, resource_type: str, params: IamBindingParams) -> BindingOperation:
        """Validate *params*, then build the binding with the type's builder.

        Any failure after validation is wrapped in ConstructionError naming
        the binding and the resource type.
        """
        if params is None:
            raise InvalidBindingParamsError("IAM binding parameters")
        for attr, label in _REQUIRED_PARAMS:
            value = getattr(params, attr, None)
            if value is None or value == "":
                raise InvalidBindingParamsError(label)

        try:
            builder = self.get_builder(resource_type)
            logger.debug(
                "Creating IAM binding '%s' for resource type '%s'",
                params.resource_name,
                resource_type,
            )
            return builder.build(params)
        except Exception as exc:
            raise ConstructionError(resource_type, exc, params.resource_name) from exc


def initialize_iam_builders(registry: IamBuilderRegistry) -> None:
    """Register the built-in builders that are not registered yet."""
    for resource_type, factory in DEFAULT_BUILDERS.items():
        if not registry.has_builder(resource_type):
            registry.register(resource_type, factory)


def initialization_info(registry: IamBuilderRegistry) -> dict[str, Any]:
    registered = registry.registered_types()
    return {
        "initialized": all(t in registered for t in DEFAULT_BUILDERS),
        "registered_types": registered,
        "builder_count": len(registered),
        "cached_builders": registry.cache_size,
    }
