"""Wiring: build the registries, chain and processor behind an AccessMatrix."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from accessmatrix_core.builders.registry import IamBuilderRegistry, initialize_iam_builders
from accessmatrix_core.config.models import AccessMatrixConfig
from accessmatrix_core.interfaces.stack import StackBackend
from accessmatrix_core.matrix.access_matrix import AccessMatrix
from accessmatrix_core.matrix.config_resolver import ConfigResolver
from accessmatrix_core.matrix.processor import PolicyRuleProcessor
from accessmatrix_core.principals.chain import PrincipalResolverChain
from accessmatrix_core.reference.cache import StackHandleCache, default_stack_cache
from accessmatrix_core.reference.references import StackReferences
from accessmatrix_core.resources.registry import ResourceTypeRegistry

logger = logging.getLogger(__name__)


def build_processor(
    config: AccessMatrixConfig | None = None,
    backend: StackBackend | None = None,
    *,
    principals: PrincipalResolverChain | None = None,
    resources: ResourceTypeRegistry | None = None,
    builders: IamBuilderRegistry | None = None,
    stack_cache: StackHandleCache | None = None,
) -> PolicyRuleProcessor:
    """Processor over the given collaborators, defaults filled in from *config*.

    Without a *backend*, cross-stack principals fail when resolved. A
    *stack_cache* passed in is resized to the configured size; the shared
    default cache is only ever grown.
    """
    config = config or AccessMatrixConfig()
    if principals is None:
        references = None
        if backend is not None:
            size = config.reference.stack_cache_size
            if stack_cache is not None:
                cache = stack_cache
                cache.resize(size)
            else:
                # Shared with other processors: grow only, never evict their handles.
                cache = default_stack_cache
                if size > cache.capacity:
                    cache.resize(size)
            references = StackReferences(
                backend,
                default_output_key=config.reference.default_output_key,
                cache=cache,
            )
        principals = PrincipalResolverChain(
            references=references,
            max_cache_size=config.access_matrix.principal_cache_size,
        )
    if builders is None:
        builders = IamBuilderRegistry()
    initialize_iam_builders(builders)
    return PolicyRuleProcessor(
        principals,
        resources or ResourceTypeRegistry.with_defaults(),
        builders,
        config.access_matrix,
    )


def create_access_matrix(
    cases: Mapping[str, Any],
    config: AccessMatrixConfig | None = None,
    backend: StackBackend | None = None,
    **collaborators: Any,
) -> AccessMatrix:
    """Process *cases* and return the populated AccessMatrix.

    Extra keyword arguments are passed to :func:`build_processor`.
    """
    config = config or AccessMatrixConfig()
    processor = build_processor(config, backend, **collaborators)
    resolver = ConfigResolver(config.access_matrix.principals, config.access_matrix)
    return AccessMatrix(cases, processor, resolver, config.access_matrix)


def get_access_matrix_info(
    processor: PolicyRuleProcessor | None = None,
    config: AccessMatrixConfig | None = None,
) -> dict[str, Any]:
    """Registered types, resolver order, configuration and cache stats."""
    config = config or AccessMatrixConfig()
    processor = processor or build_processor(config)
    return {
        "supported_resource_types": processor.builders.registered_types(),
        "handled_resource_types": processor.resources.registered_types(),
        "supported_principal_types": processor.principals.registered_types(),
        "configuration": config.access_matrix.model_dump(exclude={"principals"}),
        "cache_stats": {
            "builder_cache_size": processor.builders.cache_size,
            "handler_cache_size": processor.resources.cache_size,
            "principal_cache_size": processor.principals.cache_size,
            "stack_cache_size": len(default_stack_cache),
        },
    }


def clear_access_matrix_caches(
    processor: PolicyRuleProcessor | None = None,
    stack_cache: StackHandleCache | None = None,
) -> None:
    """Drop memoized principals, handlers, builders and stack handles."""
    if processor is not None:
        processor.principals.clear_cache()
        processor.resources.clear_cache()
        processor.builders.clear_cache()
    (stack_cache if stack_cache is not None else default_stack_cache).clear()
    logger.debug("All access matrix caches cleared")
