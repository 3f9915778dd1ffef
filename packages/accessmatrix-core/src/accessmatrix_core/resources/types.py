"""Canonical resource type tokens and the discovery getter table."""

from __future__ import annotations

PROJECT = "gcp:organizations/project:Project"
FOLDER = "gcp:organizations/folder:Folder"
SERVICE_ACCOUNT = "gcp:serviceaccount/account:Account"
BUCKET = "gcp:storage/bucket:Bucket"
CLOUD_RUN_JOB = "gcp:cloudrunv2/job:Job"
CLOUD_RUN_SERVICE = "gcp:cloudrunv2/service:Service"
SUBNETWORK = "gcp:compute/subnetwork:Subnetwork"
INSTANCE = "gcp:compute/instance:Instance"
SECRET = "gcp:secretmanager/secret:Secret"
REGIONAL_SECRET = "gcp:secretmanager/regionalSecret:RegionalSecret"
REPOSITORY = "gcp:artifactregistry/repository:Repository"

SUPPORTED_RESOURCE_TYPES: tuple[str, ...] = (
    PROJECT,
    FOLDER,
    SERVICE_ACCOUNT,
    BUCKET,
    CLOUD_RUN_JOB,
    CLOUD_RUN_SERVICE,
    SUBNETWORK,
    INSTANCE,
    SECRET,
    REGIONAL_SECRET,
    REPOSITORY,
)

# Component getters tried, in order, when a value carries no type token itself.
# Each returns the wrapped provider resource, whose own token is the answer.
DISCOVERY_GETTERS: tuple[str, ...] = (
    "get_project",
    "get_folder",
    "get_service_account",
    "get_bucket",
    "get_job",
    "get_service",
    "get_secret",
    "get_repository",
    "get_subnetwork",
    "get_instance",
)

UNKNOWN_RESOURCE_NAME = "unknown-resource"
