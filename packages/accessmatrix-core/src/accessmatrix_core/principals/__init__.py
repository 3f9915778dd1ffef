"""Principal classification and resolution."""

from accessmatrix_core.principals.chain import (
    DEFAULT_CACHE_SIZE,
    PrincipalResolverChain,
    cache_key,
    deduplicate,
    expand_principals,
)
from accessmatrix_core.principals.resolvers import (
    CrossStackPrincipalResolver,
    DeferredPrincipalResolver,
    ResourcePrincipalResolver,
    StringPrincipalResolver,
    default_resolvers,
    service_account_member,
)

__all__ = [
    "DEFAULT_CACHE_SIZE",
    "CrossStackPrincipalResolver",
    "DeferredPrincipalResolver",
    "PrincipalResolverChain",
    "ResourcePrincipalResolver",
    "StringPrincipalResolver",
    "cache_key",
    "deduplicate",
    "default_resolvers",
    "expand_principals",
    "service_account_member",
]
