"""Cross-stack reference resolution."""

from accessmatrix_core.reference.aliases import (
    RESOURCE_TYPE_ALIASES,
    SERVICE_ACCOUNT_ALIASES,
    canonical_type,
    is_service_account_alias,
)
from accessmatrix_core.reference.cache import (
    StackHandleCache,
    default_stack_cache,
    stack_handle_name,
)
from accessmatrix_core.reference.memory import InMemoryStackBackend, StaticStackHandle
from accessmatrix_core.reference.references import (
    CrossStackReference,
    DomainOptionalReference,
    StackName,
    StackReferences,
    parse_stack,
)

__all__ = [
    "RESOURCE_TYPE_ALIASES",
    "SERVICE_ACCOUNT_ALIASES",
    "CrossStackReference",
    "DomainOptionalReference",
    "InMemoryStackBackend",
    "StackHandleCache",
    "StackName",
    "StackReferences",
    "StaticStackHandle",
    "canonical_type",
    "default_stack_cache",
    "is_service_account_alias",
    "parse_stack",
    "stack_handle_name",
]
