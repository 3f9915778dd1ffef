"""Short resource-type aliases accepted by cross-stack lookups."""

from __future__ import annotations

RESOURCE_TYPE_ALIASES: dict[str, str] = {
    "serviceaccount": "gcp:serviceaccount:Account",
    "sa": "gcp:serviceaccount:Account",
    "account": "gcp:serviceaccount:Account",
    "gcs": "gcp:storage:Bucket",
    "bucket": "gcp:storage:Bucket",
    "role": "gcp:projects:IAMCustomRole",
    "orgrole": "gcp:organizations:IAMCustomRole",
    "network": "gcp:compute:Network",
    "subnet": "gcp:compute:Subnetwork",
    "connector": "gcp:vpcaccess:Connector",
    "project": "gcp:organizations:Project",
    "tag": "gcp:tags:TagValue",
    "folder": "gcp:organizations:Folder",
    "entitlement": "gcp:privilegedaccessmanager:Entitlement",
    "pam": "gcp:privilegedaccessmanager:Entitlement",
    "secret": "gcp:secretmanager:Secret",
    "secretversion": "gcp:secretmanager:SecretVersion",
    "certmap": "gcp:certificatemanager:CertificateMap",
    "cloudrun": "gcp:cloudrunv2:Service",
}

SERVICE_ACCOUNT_ALIASES = frozenset({"account", "serviceaccount", "sa"})


def canonical_type(resource_type: str) -> str:
    """Map an alias (case-insensitive) to its canonical type; unknown names pass through."""
    return RESOURCE_TYPE_ALIASES.get(resource_type.lower(), resource_type)


def is_service_account_alias(resource_type: str) -> bool:
    return resource_type.lower() in SERVICE_ACCOUNT_ALIASES
