"""Resource handler interface and per-type resource info records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from accessmatrix_core.deferred import Input


@dataclass(frozen=True)
class ResourceInfo:
    """Identifying fields extracted from a resource value."""

    resource_type: str


@dataclass(frozen=True)
class ProjectInfo(ResourceInfo):
    project_id: Input[str]


@dataclass(frozen=True)
class FolderInfo(ResourceInfo):
    folder: Input[str]


@dataclass(frozen=True)
class ServiceAccountInfo(ResourceInfo):
    service_account_id: Input[str]


@dataclass(frozen=True)
class BucketInfo(ResourceInfo):
    bucket: Input[str]


@dataclass(frozen=True)
class SubnetworkInfo(ResourceInfo):
    subnetwork: Input[str]
    region: Input[str]
    project: Input[str] | None = None


@dataclass(frozen=True)
class CloudRunInfo(ResourceInfo):
    name: Input[str]
    location: Input[str]
    project: Input[str] | None = None


@dataclass(frozen=True)
class SecretInfo(ResourceInfo):
    secret_id: Input[str]
    location: Input[str] | None = None
    project: Input[str] | None = None

    @property
    def is_regional(self) -> bool:
        return self.location is not None


@dataclass(frozen=True)
class RepositoryInfo(ResourceInfo):
    repository: Input[str]
    location: Input[str] | None = None
    project: Input[str] | None = None


@dataclass(frozen=True)
class InstanceInfo(ResourceInfo):
    instance_name: Input[str]
    zone: Input[str]
    project: Input[str] | None = None


@runtime_checkable
class ResourceHandler(Protocol):
    """Per-type strategy for identifying and reading a resource value."""

    supported_type: str

    def can_handle(self, resource: Any) -> bool: ...

    def extract_resource_info(self, resource: Any) -> ResourceInfo: ...
