"""AccessMatrix Core - principal resolution, resource discovery and IAM binding generation."""

from accessmatrix_core.builders import IamBuilderRegistry, initialize_iam_builders
from accessmatrix_core.config import AccessMatrixConfig, load_config
from accessmatrix_core.deferred import Deferred
from accessmatrix_core.errors import (
    AccessMatrixError,
    CaseProcessingError,
    ConstructionError,
    DiscoveryError,
    ExtractionError,
    NotSupportedError,
    PrincipalResolutionError,
    ReferenceNotFoundError,
    RuleProcessingError,
    UnsupportedPrincipalError,
)
from accessmatrix_core.interfaces import BindingOperation, ResolvedPrincipal
from accessmatrix_core.matrix import (
    AccessMatrix,
    PolicyRuleProcessor,
    clear_access_matrix_caches,
    create_access_matrix,
    get_access_matrix_info,
    validate_access_matrix_cases,
)
from accessmatrix_core.principals import PrincipalResolverChain
from accessmatrix_core.reference import InMemoryStackBackend, StackReferences
from accessmatrix_core.resources import ResourceTypeRegistry

__version__ = "0.1.0"

__all__ = [
    "AccessMatrix",
    "AccessMatrixConfig",
    "AccessMatrixError",
    "BindingOperation",
    "CaseProcessingError",
    "ConstructionError",
    "Deferred",
    "DiscoveryError",
    "ExtractionError",
    "IamBuilderRegistry",
    "InMemoryStackBackend",
    "NotSupportedError",
    "PolicyRuleProcessor",
    "PrincipalResolutionError",
    "PrincipalResolverChain",
    "ReferenceNotFoundError",
    "ResolvedPrincipal",
    "ResourceTypeRegistry",
    "RuleProcessingError",
    "StackReferences",
    "UnsupportedPrincipalError",
    "clear_access_matrix_caches",
    "create_access_matrix",
    "get_access_matrix_info",
    "initialize_iam_builders",
    "load_config",
    "validate_access_matrix_cases",
]
