"""Resource type discovery, per-type field extraction and naming."""

from accessmatrix_core.resources.handlers import (
    DEFAULT_HANDLERS,
    BaseResourceHandler,
    BucketHandler,
    CloudRunHandler,
    FolderHandler,
    InstanceHandler,
    ProjectHandler,
    RepositoryHandler,
    SecretHandler,
    ServiceAccountHandler,
    SubnetworkHandler,
)
from accessmatrix_core.resources.naming import extract_resource_name
from accessmatrix_core.resources.registry import ResourceTypeRegistry
from accessmatrix_core.resources.types import (
    DISCOVERY_GETTERS,
    SUPPORTED_RESOURCE_TYPES,
    UNKNOWN_RESOURCE_NAME,
)

__all__ = [
    "DEFAULT_HANDLERS",
    "DISCOVERY_GETTERS",
    "SUPPORTED_RESOURCE_TYPES",
    "UNKNOWN_RESOURCE_NAME",
    "BaseResourceHandler",
    "BucketHandler",
    "CloudRunHandler",
    "FolderHandler",
    "InstanceHandler",
    "ProjectHandler",
    "RepositoryHandler",
    "ResourceTypeRegistry",
    "SecretHandler",
    "ServiceAccountHandler",
    "SubnetworkHandler",
    "extract_resource_name",
]
