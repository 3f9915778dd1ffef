"""Interfaces between the engine and its collaborators."""

from accessmatrix_core.interfaces.builder import BindingOperation, IamBindingParams, IamBuilder
from accessmatrix_core.interfaces.principal import PrincipalResolver, ResolvedPrincipal
from accessmatrix_core.interfaces.resource import (
    BucketInfo,
    CloudRunInfo,
    FolderInfo,
    InstanceInfo,
    ProjectInfo,
    RepositoryInfo,
    ResourceHandler,
    ResourceInfo,
    SecretInfo,
    ServiceAccountInfo,
    SubnetworkInfo,
)
from accessmatrix_core.interfaces.stack import StackBackend, StackHandle

__all__ = [
    "BindingOperation",
    "BucketInfo",
    "CloudRunInfo",
    "FolderInfo",
    "IamBindingParams",
    "IamBuilder",
    "InstanceInfo",
    "PrincipalResolver",
    "ProjectInfo",
    "RepositoryInfo",
    "ResolvedPrincipal",
    "ResourceHandler",
    "ResourceInfo",
    "SecretInfo",
    "ServiceAccountInfo",
    "StackBackend",
    "StackHandle",
    "SubnetworkInfo",
]
