"""Operator-facing sanity checks over a raw case mapping."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from accessmatrix_core.config.models import ValidationConfig
from accessmatrix_core.principals.chain import expand_principals


class ValidationResult(BaseModel):
    """Result of validating an access matrix case mapping."""

    valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


def _principal_count(case_value: Mapping[str, Any], rules: list[Any]) -> int:
    count = len(expand_principals(case_value.get("principals")))
    for rule in rules:
        if isinstance(rule, Mapping):
            count += len(expand_principals(rule.get("principals")))
    return count


def validate_access_matrix_cases(
    cases: Any, settings: ValidationConfig | None = None
) -> ValidationResult:
    """Flag structural problems (errors) and size outliers (warnings).

    Nothing is resolved or built; this only inspects the raw shape.
    """
    settings = settings or ValidationConfig()
    result = ValidationResult()

    if cases is None or not isinstance(cases, Mapping):
        result.errors.append("Cases must be a non-null mapping")
        result.valid = False
        return result

    if not cases:
        result.warnings.append("No cases provided - no IAM bindings will be created")
    if len(cases) > settings.max_cases:
        result.warnings.append(f"Large number of cases ({len(cases)}) may impact performance")

    for case_name, case_value in cases.items():
        if not isinstance(case_name, str) or not case_name:
            result.errors.append("Case names must be non-empty strings")
            continue
        if case_value is None:
            result.errors.append(f"Case '{case_name}' cannot be null")
            continue

        if isinstance(case_value, (list, tuple)):
            rules = list(case_value)
            principals = _principal_count({}, rules)
        elif isinstance(case_value, Mapping):
            raw_rules = case_value.get("rules")
            if not isinstance(raw_rules, (list, tuple)):
                result.errors.append(f"Case '{case_name}' must have a 'rules' list")
                continue
            rules = list(raw_rules)
            principals = _principal_count(case_value, rules)
        else:
            result.errors.append(
                f"Case '{case_name}' must be a list of rules or a use case mapping"
            )
            continue

        if not rules:
            result.warnings.append(f"Case '{case_name}' has no rules")
        elif len(rules) > settings.max_rules_per_case:
            result.warnings.append(
                f"Case '{case_name}' has many rules ({len(rules)}) which may impact performance"
            )
        if principals > settings.max_principals:
            result.warnings.append(
                f"Case '{case_name}' references many principals ({principals}) "
                "which may impact performance"
            )

    result.valid = not result.errors
    return result
