"""IAM builders: turn (resource, role, member) into binding operations."""

from accessmatrix_core.builders.artifacts import RepositoryIamBuilder
from accessmatrix_core.builders.base import BaseIamBuilder
from accessmatrix_core.builders.cloudrun import CloudRunJobIamBuilder, CloudRunServiceIamBuilder
from accessmatrix_core.builders.compute import InstanceIamBuilder, SubnetworkIamBuilder
from accessmatrix_core.builders.registry import (
    DEFAULT_BUILDERS,
    IamBuilderRegistry,
    initialization_info,
    initialize_iam_builders,
)
from accessmatrix_core.builders.resourcemanager import (
    FolderIamBuilder,
    ProjectIamBuilder,
    ServiceAccountIamBuilder,
)
from accessmatrix_core.builders.secrets import SecretIamBuilder
from accessmatrix_core.builders.storage import BucketIamBuilder

__all__ = [
    "DEFAULT_BUILDERS",
    "BaseIamBuilder",
    "BucketIamBuilder",
    "CloudRunJobIamBuilder",
    "CloudRunServiceIamBuilder",
    "FolderIamBuilder",
    "IamBuilderRegistry",
    "InstanceIamBuilder",
    "ProjectIamBuilder",
    "RepositoryIamBuilder",
    "SecretIamBuilder",
    "ServiceAccountIamBuilder",
    "SubnetworkIamBuilder",
    "initialization_info",
    "initialize_iam_builders",
]
