"""Cross-stack references: named entities recorded in other deployments' outputs.

Two addressing modes exist:

* domain-scoped (:class:`CrossStackReference`): records live at
  ``outputs[output_key][domain][canonical_type][name]``;
* domain-optional (:class:`DomainOptionalReference`): the stack exports
  ``name -> "email"`` (or ``"serviceAccount:email"``) strings at its root.

All lookups return :class:`Deferred` values; nothing is read until the
deployment engine resolves them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, NamedTuple

from accessmatrix_core.deferred import Deferred
from accessmatrix_core.errors import (
    AccessMatrixError,
    DomainOptionalReferenceNotFoundError,
    DomainReferenceNotFoundError,
    InvalidStackError,
    InvalidStackOutputError,
    MissingPropertyError,
)
from accessmatrix_core.interfaces.stack import StackBackend, StackHandle
from accessmatrix_core.reference.aliases import canonical_type
from accessmatrix_core.reference.cache import StackHandleCache, default_stack_cache

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_PREFIX = "serviceAccount:"


class StackName(NamedTuple):
    organization: str
    project: str
    environment: str


def parse_stack(stack: str) -> StackName:
    """Split ``org/project/env``; anything but exactly three segments is rejected."""
    if not isinstance(stack, str):
        raise InvalidStackError(repr(stack))
    parts = stack.split("/")
    if len(parts) != 3:
        raise InvalidStackError(stack)
    return StackName(*parts)


def _require_mapping(raw: Any) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise InvalidStackOutputError(
            f"Invalid stack output structure: expected mapping, got {type(raw).__name__}"
        )
    return raw


def _require_property(record: Mapping[str, Any], prop: str) -> Any:
    value = record.get(prop) if isinstance(record, Mapping) else None
    if value is None:
        raise MissingPropertyError(prop)
    return value


class _BaseReference:
    def __init__(
        self,
        stack: str,
        backend: StackBackend,
        cache: StackHandleCache | None = None,
    ) -> None:
        self.stack = stack
        self.stack_name = parse_stack(stack)
        self._cache = cache if cache is not None else default_stack_cache
        self._handle: StackHandle = self._cache.get_or_open(stack, backend)

    @property
    def handle(self) -> StackHandle:
        return self._handle


class CrossStackReference(_BaseReference):
    """Domain-scoped reference into another stack's output graph."""

    def __init__(
        self,
        stack: str,
        domain: str,
        output_key: str | None,
        *,
        backend: StackBackend,
        cache: StackHandleCache | None = None,
    ) -> None:
        parse_stack(stack)
        if not output_key:
            raise AccessMatrixError(
                "Missing required configuration: 'reference.default_output_key' "
                "(or pass an explicit output key / version)"
            )
        super().__init__(stack, backend, cache)
        self.domain = domain
        self.output_key = output_key

    def get(self, resource_type: str, name: str) -> Deferred[Mapping[str, Any]]:
        """Deferred lookup of the full record for (*resource_type*, *name*)."""
        full_type = canonical_type(resource_type)

        def navigate(raw: Any) -> Mapping[str, Any]:
            root = _require_mapping(raw)
            domain_node = root.get(self.domain)
            type_node = domain_node.get(full_type) if isinstance(domain_node, Mapping) else None
            record = type_node.get(name) if isinstance(type_node, Mapping) else None
            if record is None:
                raise DomainReferenceNotFoundError(name, full_type, self.domain, self.stack)
            return record

        return self._handle.get_output(self.output_key).apply(navigate)

    def _field(self, resource_type: str, name: str, prop: str) -> Deferred[Any]:
        return self.get(resource_type, name).apply(lambda rec: _require_property(rec, prop))

    def get_id(self, resource_type: str, name: str) -> Deferred[str]:
        return self._field(resource_type, name, "id")

    def get_name(self, resource_type: str, name: str) -> Deferred[str]:
        return self._field(resource_type, name, "name")

    def get_email(self, resource_type: str, name: str) -> Deferred[str]:
        return self._field(resource_type, name, "email")

    def get_member(self, resource_type: str, name: str) -> Deferred[str]:
        return self._field(resource_type, name, "member")

    def get_project_id(self, resource_type: str, name: str) -> Deferred[str]:
        return self._field(resource_type, name, "projectId")

    def get_version(self, resource_type: str, name: str) -> Deferred[str]:
        return self._field(resource_type, name, "version")

    def get_identifier(self, name: str) -> str:
        """``{project}-{name}-{env}-{domain}``, computed without any lookup."""
        s = self.stack_name
        return f"{s.project}-{name}-{s.environment}-{self.domain}"


class DomainOptionalReference(_BaseReference):
    """Reference into a stack that exports plain ``name -> email`` strings."""

    def get(self, name: str) -> Deferred[dict[str, str]]:
        """Deferred lookup of ``root[name]`` converted to an email/member record."""

        def navigate(raw: Any) -> dict[str, str]:
            root = _require_mapping(raw)
            value = root.get(name)
            if value is None:
                raise DomainOptionalReferenceNotFoundError(name, self.stack, list(root))
            if not isinstance(value, str):
                raise InvalidStackOutputError(
                    f"Expected string value for '{name}' in stack '{self.stack}', "
                    f"got {type(value).__name__}"
                )
            return self._to_record(value)

        return self._handle.outputs().apply(navigate)

    @staticmethod
    def _to_record(value: str) -> dict[str, str]:
        if value.startswith(SERVICE_ACCOUNT_PREFIX):
            email = value[len(SERVICE_ACCOUNT_PREFIX):]
            member = value
        else:
            email = value
            member = SERVICE_ACCOUNT_PREFIX + value
        return {
            "email": email,
            "member": member,
            "id": email,
            "name": email.split("@")[0],
        }

    def _field(self, name: str, prop: str) -> Deferred[Any]:
        return self.get(name).apply(lambda rec: _require_property(rec, prop))

    def get_id(self, name: str) -> Deferred[str]:
        return self._field(name, "id")

    def get_name(self, name: str) -> Deferred[str]:
        return self._field(name, "name")

    def get_email(self, name: str) -> Deferred[str]:
        return self._field(name, "email")

    def get_member(self, name: str) -> Deferred[str]:
        return self._field(name, "member")

    def get_project_id(self, name: str) -> Deferred[str]:
        # Domain-optional records never carry a project id; this always fails on resolution.
        return self._field(name, "projectId")

    def get_identifier(self, name: str) -> str:
        """``{project}-{name}-{env}``, computed without any lookup."""
        s = self.stack_name
        return f"{s.project}-{name}-{s.environment}"


class StackReferences:
    """Builds references that share one backend, default output key and handle cache."""

    def __init__(
        self,
        backend: StackBackend,
        *,
        default_output_key: str | None = None,
        cache: StackHandleCache | None = None,
    ) -> None:
        self.backend = backend
        self.default_output_key = default_output_key
        self.cache = cache if cache is not None else default_stack_cache

    def with_domain(
        self, stack: str, domain: str, output_key: str | None = None
    ) -> CrossStackReference:
        return CrossStackReference(
            stack,
            domain,
            output_key or self.default_output_key,
            backend=self.backend,
            cache=self.cache,
        )

    def without_domain(self, stack: str) -> DomainOptionalReference:
        return DomainOptionalReference(stack, self.backend, self.cache)
