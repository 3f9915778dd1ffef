"""Error taxonomy for the access matrix engine."""

from __future__ import annotations

from collections.abc import Iterable


class AccessMatrixError(Exception):
    """Base class for every error raised by the engine."""


# -- Resource discovery and extraction ----------------------------------------


class DiscoveryError(AccessMatrixError):
    """Raised when a resource's type cannot be determined."""

    def __init__(self, description: str) -> None:
        self.description = description
        super().__init__(f"Cannot determine resource type for: {description}")


class NotSupportedError(AccessMatrixError):
    """Raised when no handler or builder is registered for a resource type."""

    def __init__(
        self, resource_type: str, available: Iterable[str] = (), message: str | None = None
    ) -> None:
        self.resource_type = resource_type
        self.available = list(available)
        if message is None:
            message = (
                f"Resource type '{resource_type}' is not supported. "
                f"Available types: {', '.join(self.available) or '(none)'}"
            )
        super().__init__(message)


class UnsupportedPrincipalError(NotSupportedError):
    """Raised when no resolver in the chain claims a principal value."""

    def __init__(self, principal_type: str, info: str, available: Iterable[str] = ()) -> None:
        self.principal_type = principal_type
        self.info = info
        available = list(available)
        super().__init__(
            principal_type,
            available,
            f"Principal of type '{principal_type}' is not supported. "
            f"Principal info: {info}. "
            f"Registered resolvers: {', '.join(available) or '(none)'}",
        )


class ExtractionError(AccessMatrixError):
    """Raised when a required identifying field is missing from a resource."""

    def __init__(self, resource_kind: str, field: str, context: str | None = None) -> None:
        self.resource_kind = resource_kind
        self.field = field
        self.context = context
        msg = f"Unable to determine {resource_kind} {field}"
        if context:
            msg += f" {context}"
        super().__init__(msg)


# -- Principal resolution ------------------------------------------------------


class PrincipalResolutionError(AccessMatrixError):
    """Wraps any failure raised while resolving the principal at *index*."""

    def __init__(self, index: int, cause: Exception) -> None:
        self.index = index
        super().__init__(f"Failed to resolve principal at index {index}: {cause}")
        self.__cause__ = cause


# -- Cross-stack references ----------------------------------------------------


class InvalidStackError(AccessMatrixError, ValueError):
    """Raised when a stack name is not in ``org/project/env`` form."""

    def __init__(self, stack: str) -> None:
        self.stack = stack
        super().__init__(
            f"Stack must be in 'organization/project/environment' format, got '{stack}'"
        )


class StackNotFoundError(AccessMatrixError, LookupError):
    """Raised by a stack backend that holds no outputs for the stack."""

    def __init__(self, stack: str) -> None:
        self.stack = stack
        super().__init__(f"No outputs recorded for stack '{stack}'")


class InvalidStackOutputError(AccessMatrixError):
    """Raised when a remote output graph does not have the expected shape."""


class ReferenceNotFoundError(AccessMatrixError, LookupError):
    """Base for lookups that miss an entry in a remote output graph."""

    def __init__(self, message: str, name: str, stack: str) -> None:
        self.name = name
        self.stack = stack
        super().__init__(message)


class DomainReferenceNotFoundError(ReferenceNotFoundError):
    """A domain-scoped lookup found nothing at ``root[domain][type][name]``."""

    def __init__(self, name: str, resource_type: str, domain: str, stack: str) -> None:
        self.resource_type = resource_type
        self.domain = domain
        super().__init__(
            f"Domain-based resource '{name}' of type '{resource_type}' not found "
            f"under domain '{domain}' in stack '{stack}'",
            name,
            stack,
        )


class DomainOptionalReferenceNotFoundError(ReferenceNotFoundError):
    """A domain-optional lookup found nothing at ``root[name]``."""

    def __init__(self, name: str, stack: str, available: Iterable[str] = ()) -> None:
        self.available = list(available)
        super().__init__(
            f"Domain-optional resource '{name}' not found in stack '{stack}'. "
            f"Available keys: [{', '.join(self.available)}]",
            name,
            stack,
        )


class MissingPropertyError(AccessMatrixError):
    """Raised by typed reference accessors when the record lacks a field."""

    def __init__(self, prop: str) -> None:
        self.property = prop
        super().__init__(f"Property '{prop}' not found on fetched resource")


# -- Binding construction ------------------------------------------------------


class InvalidBindingParamsError(AccessMatrixError, ValueError):
    """Raised when binding parameters are incomplete."""

    def __init__(self, missing: str) -> None:
        self.missing = missing
        super().__init__(f"{missing} is required for IAM binding")


class ConstructionError(AccessMatrixError):
    """Wraps a failure while creating a builder or a binding operation."""

    def __init__(
        self, resource_type: str, cause: Exception, resource_name: str | None = None
    ) -> None:
        self.resource_type = resource_type
        self.resource_name = resource_name
        if resource_name is None:
            msg = f"Failed to create IAM builder for resource type '{resource_type}': {cause}"
        else:
            msg = (
                f"Failed to create IAM binding '{resource_name}' "
                f"for resource type '{resource_type}': {cause}"
            )
        super().__init__(msg)
        self.__cause__ = cause


# -- Rule and case processing --------------------------------------------------


class RuleProcessingError(AccessMatrixError):
    """Wraps any failure raised while processing one rule of a use case."""

    def __init__(
        self,
        case_name: str,
        rule_index: int,
        cause: Exception,
        operations: Iterable[object] = (),
    ) -> None:
        self.case_name = case_name
        self.rule_index = rule_index
        # Operations produced by the rules before the failing one.
        self.operations = list(operations)
        super().__init__(
            f"Failed to process access matrix rule {rule_index} in case '{case_name}': {cause}"
        )
        self.__cause__ = cause


class CaseProcessingError(AccessMatrixError):
    """Raised by the orchestrator when a use case aborts."""

    def __init__(self, case_name: str, cause: Exception) -> None:
        self.case_name = case_name
        super().__init__(f"Failed to process case '{case_name}': {cause}")
        self.__cause__ = cause
