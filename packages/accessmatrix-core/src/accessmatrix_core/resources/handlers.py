"""Per-type resource handlers.

Every handler reads its fields in the same order:

1. a component wrapping the provider resource (``get_bucket()`` etc.);
2. the value itself, when it carries this handler's type token;
3. flat fallback fields on a plain mapping or object.

A required field still missing afterwards raises :class:`ExtractionError`.
The IAM builders reuse these handlers, so binding construction and
resource identification always agree.
"""

from __future__ import annotations

from typing import Any

from accessmatrix_core.errors import ExtractionError
from accessmatrix_core.helpers import has_method, read_field, type_tag
from accessmatrix_core.interfaces.resource import (
    BucketInfo,
    CloudRunInfo,
    FolderInfo,
    InstanceInfo,
    ProjectInfo,
    RepositoryInfo,
    ResourceInfo,
    SecretInfo,
    ServiceAccountInfo,
    SubnetworkInfo,
)
from accessmatrix_core.resources import types


class BaseResourceHandler:
    """Shared plumbing: type matching, nested-handle lookup, required-field checks."""

    supported_type: str = ""
    kind: str = "resource"
    getter: str | None = None

    def __init__(self, supported_type: str | None = None) -> None:
        if supported_type is not None:
            self.supported_type = supported_type

    def can_handle(self, resource: Any) -> bool:
        tag = type_tag(resource)
        if tag is not None:
            return tag == self.supported_type
        try:
            return type_tag(self.nested(resource)) == self.supported_type
        except Exception:
            return False

    def nested(self, resource: Any) -> Any:
        """The provider resource a component wraps, or None."""
        if self.getter and has_method(resource, self.getter):
            return getattr(resource, self.getter)()
        return None

    def is_instance(self, resource: Any) -> bool:
        return type_tag(resource) == self.supported_type

    def source(self, resource: Any) -> Any:
        """Where fields are read from: the wrapped resource if any, else the value."""
        nested = self.nested(resource)
        return nested if nested is not None else resource

    def require(self, field: str, context: str | None, *values: Any) -> None:
        if any(v is None or v == "" for v in values):
            raise ExtractionError(self.kind, field, context)

    def extract_resource_info(self, resource: Any, context: str | None = None) -> ResourceInfo:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.supported_type!r})"


class ProjectHandler(BaseResourceHandler):
    supported_type = types.PROJECT
    kind = "project"
    getter = "get_project"

    def extract_resource_info(self, resource: Any, context: str | None = None) -> ProjectInfo:
        if has_method(resource, "get_project_id"):
            project_id = resource.get_project_id()
        else:
            nested = self.nested(resource)
            if nested is not None:
                project_id = read_field(nested, "project_id")
            elif self.is_instance(resource):
                project_id = read_field(resource, "project_id")
            else:
                project_id = read_field(resource, "project_id", "id")
        self.require("ID", context, project_id)
        return ProjectInfo(self.supported_type, project_id)


class FolderHandler(BaseResourceHandler):
    supported_type = types.FOLDER
    kind = "folder"
    getter = "get_folder"

    def extract_resource_info(self, resource: Any, context: str | None = None) -> FolderInfo:
        nested = self.nested(resource)
        if nested is not None:
            folder = read_field(nested, "id")
        elif self.is_instance(resource):
            folder = read_field(resource, "id")
        else:
            folder = read_field(resource, "id", "folder_id", "folder")
        self.require("ID", context, folder)
        return FolderInfo(self.supported_type, folder)


class ServiceAccountHandler(BaseResourceHandler):
    supported_type = types.SERVICE_ACCOUNT
    kind = "service account"
    getter = "get_service_account"

    def extract_resource_info(
        self, resource: Any, context: str | None = None
    ) -> ServiceAccountInfo:
        nested = self.nested(resource)
        if nested is not None:
            account = read_field(nested, "name")
        elif self.is_instance(resource):
            account = read_field(resource, "name")
        else:
            account = read_field(resource, "name", "service_account_id")
        self.require("ID", context, account)
        return ServiceAccountInfo(self.supported_type, account)


class BucketHandler(BaseResourceHandler):
    supported_type = types.BUCKET
    kind = "bucket"
    getter = "get_bucket"

    def extract_resource_info(self, resource: Any, context: str | None = None) -> BucketInfo:
        nested = self.nested(resource)
        if nested is not None:
            bucket = read_field(nested, "name")
        elif self.is_instance(resource):
            bucket = read_field(resource, "name")
        else:
            bucket = read_field(resource, "name", "bucket")
        self.require("name", context, bucket)
        return BucketInfo(self.supported_type, bucket)


class SubnetworkHandler(BaseResourceHandler):
    supported_type = types.SUBNETWORK
    kind = "subnetwork"
    getter = "get_subnetwork"

    def extract_resource_info(
        self, resource: Any, context: str | None = None
    ) -> SubnetworkInfo:
        src = self.source(resource)
        name = read_field(src, "name", "subnetwork")
        region = read_field(src, "region")
        self.require("name/region", context, name, region)
        return SubnetworkInfo(
            self.supported_type, name, region, read_field(src, "project")
        )


class CloudRunHandler(BaseResourceHandler):
    """Cloud Run v2 services and jobs share one shape: name + location."""

    def __init__(self, supported_type: str = types.CLOUD_RUN_SERVICE) -> None:
        super().__init__(supported_type)
        if supported_type == types.CLOUD_RUN_JOB:
            self.kind, self.getter = "Cloud Run Job", "get_job"
        else:
            self.kind, self.getter = "Cloud Run Service", "get_service"

    def extract_resource_info(self, resource: Any, context: str | None = None) -> CloudRunInfo:
        src = self.source(resource)
        name = read_field(src, "name")
        location = read_field(src, "location")
        self.require("name/location", context, name, location)
        return CloudRunInfo(self.supported_type, name, location, read_field(src, "project"))


class SecretHandler(BaseResourceHandler):
    """Global and regional secrets; only regional ones carry a location."""

    kind = "secret"
    getter = "get_secret"

    def __init__(self, supported_type: str = types.SECRET) -> None:
        super().__init__(supported_type)

    def can_handle(self, resource: Any) -> bool:
        tag = type_tag(resource)
        if tag is None:
            try:
                tag = type_tag(self.nested(resource))
            except Exception:
                return False
        return tag in (types.SECRET, types.REGIONAL_SECRET)

    def extract_resource_info(self, resource: Any, context: str | None = None) -> SecretInfo:
        src = self.source(resource)
        regional = type_tag(src) == types.REGIONAL_SECRET
        secret_id = read_field(src, "id", "secret_id")
        self.require("ID", context, secret_id)
        return SecretInfo(
            self.supported_type,
            secret_id,
            location=read_field(src, "location") if regional else None,
            project=read_field(src, "project"),
        )


class RepositoryHandler(BaseResourceHandler):
    supported_type = types.REPOSITORY
    kind = "repository"
    getter = "get_repository"

    def extract_resource_info(
        self, resource: Any, context: str | None = None
    ) -> RepositoryInfo:
        src = self.source(resource)
        repository = read_field(src, "repository_id", "name")
        self.require("ID", context, repository)
        return RepositoryInfo(
            self.supported_type,
            repository,
            location=read_field(src, "location"),
            project=read_field(src, "project"),
        )


class InstanceHandler(BaseResourceHandler):
    supported_type = types.INSTANCE
    kind = "Compute Instance"
    getter = "get_instance"

    def extract_resource_info(self, resource: Any, context: str | None = None) -> InstanceInfo:
        src = self.source(resource)
        name = read_field(src, "name")
        zone = read_field(src, "zone")
        self.require("name/zone", context, name, zone)
        return InstanceInfo(self.supported_type, name, zone, read_field(src, "project"))


# Resource type -> handler factory.
DEFAULT_HANDLERS: dict[str, Any] = {
    types.PROJECT: ProjectHandler,
    types.FOLDER: FolderHandler,
    types.SERVICE_ACCOUNT: ServiceAccountHandler,
    types.BUCKET: BucketHandler,
    types.CLOUD_RUN_JOB: lambda: CloudRunHandler(types.CLOUD_RUN_JOB),
    types.CLOUD_RUN_SERVICE: lambda: CloudRunHandler(types.CLOUD_RUN_SERVICE),
    types.SUBNETWORK: SubnetworkHandler,
    types.INSTANCE: InstanceHandler,
    types.SECRET: lambda: SecretHandler(types.SECRET),
    types.REGIONAL_SECRET: lambda: SecretHandler(types.REGIONAL_SECRET),
    types.REPOSITORY: RepositoryHandler,
}
