"""Turns one use case into binding operations."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from accessmatrix_core.builders.registry import IamBuilderRegistry
from accessmatrix_core.config.models import AccessMatrixSettings
from accessmatrix_core.deferred import Deferred
from accessmatrix_core.errors import RuleProcessingError
from accessmatrix_core.helpers import has_method
from accessmatrix_core.interfaces.builder import BindingOperation, IamBindingParams
from accessmatrix_core.interfaces.principal import ResolvedPrincipal
from accessmatrix_core.matrix.models import PolicyRule, UseCase
from accessmatrix_core.principals.chain import PrincipalResolverChain, deduplicate, expand_principals
from accessmatrix_core.resources.registry import ResourceTypeRegistry

logger = logging.getLogger(__name__)

_ROLE_PREFIX = re.compile(r"^.*roles/")


def is_bulk_resource(resource: Any) -> bool:
    return has_method(resource, "get_accounts")


def is_custom_role(role: Any) -> bool:
    """Role handles (not plain strings or deferred values) that know their own name."""
    return not isinstance(role, Deferred) and has_method(role, "get_name")


def normalize_role(role: Any) -> Any:
    """The value handed to the builder: trimmed string, custom role name, or as is."""
    if isinstance(role, str):
        return role.strip()
    if is_custom_role(role):
        return role.get_name()
    return role


def role_label(role: Any, label: str | None, rule_index: int) -> str:
    """Role segment of a binding name.

    An explicit label wins. String roles lose everything up to ``roles/``
    (``organizations/1/roles/custom`` -> ``custom``).
    """
    if label and isinstance(label, str):
        return label
    if isinstance(role, str):
        return _ROLE_PREFIX.sub("", role)
    if is_custom_role(role):
        try:
            meta = getattr(role, "meta", None)
            name = meta.get_name() if has_method(meta, "get_name") else role.get_name()
            if isinstance(name, str) and name:
                return name
        except Exception:
            logger.debug("Could not name custom role %r", role, exc_info=True)
    return f"role-{rule_index}"


class PolicyRuleProcessor:
    """Resolves principals and resources of each rule and dispatches to the builders.

    Rules run in order. The first failing rule raises RuleProcessingError;
    the remaining rules of the case are not attempted. Operations built for
    the earlier rules stay available on the error's ``operations``.
    """

    def __init__(
        self,
        principals: PrincipalResolverChain,
        resources: ResourceTypeRegistry,
        builders: IamBuilderRegistry,
        settings: AccessMatrixSettings | None = None,
    ) -> None:
        self.principals = principals
        self.resources = resources
        self.builders = builders
        self.settings = settings or AccessMatrixSettings()

    def process_use_case(
        self,
        use_case: UseCase,
        config_principals: Sequence[Any] = (),
        case_name: str | None = None,
    ) -> list[BindingOperation]:
        case_name = case_name or use_case.name or "unknown"
        operations: list[BindingOperation] = []

        if len(use_case.rules) > self.settings.max_rules_per_case:
            logger.warning(
                "Processing %d rules in case '%s'. Consider splitting large cases.",
                len(use_case.rules),
                case_name,
            )

        for rule_index, raw_rule in enumerate(use_case.rules):
            try:
                rule = PolicyRule.from_input(raw_rule)
                principals = self.effective_principals(
                    config_principals, use_case.principals, rule.principals
                )
                if not principals:
                    if self.settings.enable_detailed_logging:
                        logger.info(
                            "No principals for rule %d in case '%s', skipping",
                            rule_index,
                            case_name,
                        )
                    continue

                if len(principals) > self.settings.max_principals_threshold:
                    logger.warning(
                        "Rule %d in case '%s' has %d principals. This may impact performance.",
                        rule_index,
                        case_name,
                        len(principals),
                    )

                operations.extend(self.process_rule(rule, rule_index, principals))
            except Exception as exc:
                logger.error(
                    "Failed to process rule %d in case '%s': %s", rule_index, case_name, exc
                )
                raise RuleProcessingError(case_name, rule_index, exc, operations) from exc

        return operations

    def process_rule(
        self, rule: PolicyRule, rule_index: int, principals: Sequence[Any]
    ) -> list[BindingOperation]:
        """One operation per (principal, sub-resource), principal-major."""
        operations: list[BindingOperation] = []
        for principal_index, principal in enumerate(principals):
            resolved = self.principals.resolve(principal, principal_index)
            if is_bulk_resource(rule.resource):
                for key, sub_resource in rule.resource.get_accounts().items():
                    operations.append(
                        self._bind(rule, sub_resource, rule_index, principal_index, resolved, key)
                    )
            else:
                operations.append(
                    self._bind(rule, rule.resource, rule_index, principal_index, resolved)
                )
        return operations

    def effective_principals(
        self, config_principals: Sequence[Any], case_principals: Any, rule_principals: Any
    ) -> list[Any]:
        """Config, then case, then rule principals; bulk containers expanded, repeats dropped."""
        merged = [
            *config_principals,
            *expand_principals(case_principals),
            *expand_principals(rule_principals),
        ]
        return deduplicate(merged)

    def binding_name(
        self,
        rule: PolicyRule,
        resource: Any,
        rule_index: int,
        principal_index: int,
        resolved: ResolvedPrincipal,
        resource_key: str | None = None,
    ) -> str:
        component = resource_key or self.resources.get_resource_name(resource)
        identifier = resolved.identifier or f"principal-{principal_index}"
        name = f"{component}:{role_label(rule.role, rule.label, rule_index)}:{identifier}"

        limit = self.settings.max_resource_name_length
        if len(name) > limit:
            logger.warning(
                "Truncating resource name from %d to %d characters: %s", len(name), limit, name
            )
            return name[:limit]
        return name

    def _bind(
        self,
        rule: PolicyRule,
        resource: Any,
        rule_index: int,
        principal_index: int,
        resolved: ResolvedPrincipal,
        resource_key: str | None = None,
    ) -> BindingOperation:
        resource_type = self.resources.get_handler(resource).supported_type
        params = IamBindingParams(
            resource=resource,
            role=normalize_role(rule.role),
            member=resolved.member,
            resource_name=self.binding_name(
                rule, resource, rule_index, principal_index, resolved, resource_key
            ),
        )
        return self.builders.create_iam_binding(resource_type, params)
