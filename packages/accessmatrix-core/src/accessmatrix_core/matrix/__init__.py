"""Use-case orchestration: parse cases, process rules, validate input."""

from accessmatrix_core.matrix.access_matrix import AccessMatrix
from accessmatrix_core.matrix.config_resolver import ConfigResolver, CrossStackPrincipalEntry
from accessmatrix_core.matrix.factory import (
    build_processor,
    clear_access_matrix_caches,
    create_access_matrix,
    get_access_matrix_info,
)
from accessmatrix_core.matrix.models import PolicyRule, UseCase
from accessmatrix_core.matrix.processor import PolicyRuleProcessor, normalize_role, role_label
from accessmatrix_core.matrix.validation import ValidationResult, validate_access_matrix_cases

__all__ = [
    "AccessMatrix",
    "ConfigResolver",
    "CrossStackPrincipalEntry",
    "PolicyRule",
    "PolicyRuleProcessor",
    "UseCase",
    "ValidationResult",
    "build_processor",
    "clear_access_matrix_caches",
    "create_access_matrix",
    "get_access_matrix_info",
    "normalize_role",
    "role_label",
    "validate_access_matrix_cases",
]
