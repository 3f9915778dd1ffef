"""The principal variants understood by the resolver chain.

Each resolver pairs a predicate (``can_resolve``) with a resolution step.
The chain tries them in a fixed order, so predicates only need to reject
what earlier resolvers already claimed:

1. literal strings (``"user:alice@example.com"``)
2. deferred values produced by the deployment engine
3. cross-stack objects ``{stack, name, domain?, version?, resource_type?}``
4. resource handles exposing ``email`` or ``get_email()``
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from accessmatrix_core.deferred import Deferred
from accessmatrix_core.errors import AccessMatrixError
from accessmatrix_core.helpers import describe, has_field, has_method, read_field, read_str, type_tag
from accessmatrix_core.interfaces.principal import ResolvedPrincipal
from accessmatrix_core.reference.aliases import is_service_account_alias
from accessmatrix_core.reference.references import SERVICE_ACCOUNT_PREFIX, StackReferences

logger = logging.getLogger(__name__)

DEFERRED_FALLBACK_IDENTIFIER = "output-principal"
DEFAULT_PRINCIPAL_RESOURCE_TYPE = "account"


def service_account_member(email: Any) -> Any:
    """``serviceAccount:<email>``, staying deferred when *email* is."""
    if isinstance(email, Deferred):
        return Deferred.format(SERVICE_ACCOUNT_PREFIX + "{}", email)
    return f"{SERVICE_ACCOUNT_PREFIX}{email}"


def hinted_resource_name(resources: tuple[Any, ...]) -> str | None:
    """Logical name of the first upstream resource attached to a deferred value."""
    if not resources:
        return None
    return read_str(resources[0], "_logical_name", "_name")


class StringPrincipalResolver:
    """``"type:value"`` strings; the identifier is the part after the first colon."""

    def can_resolve(self, principal: Any) -> bool:
        return isinstance(principal, str)

    def resolve(self, principal: str, principal_index: int) -> ResolvedPrincipal:
        parts = principal.split(":")
        identifier = parts[1] if len(parts) > 1 else parts[0]
        return ResolvedPrincipal(member=principal, identifier=identifier)


class DeferredPrincipalResolver:
    """Membership values not known until the deployment engine runs."""

    def can_resolve(self, principal: Any) -> bool:
        return isinstance(principal, Deferred)

    def resolve(self, principal: Deferred, principal_index: int) -> ResolvedPrincipal:
        identifier = (
            principal.identifier_hint
            or hinted_resource_name(principal.resources)
            or DEFERRED_FALLBACK_IDENTIFIER
        )
        return ResolvedPrincipal(member=principal, identifier=identifier)


class CrossStackPrincipalResolver:
    """Principals recorded by another deployment, looked up by stack and name.

    With a ``domain`` the lookup is domain-scoped and the identifier is
    ``{project}-{name}-{env}-{domain}``; without one it is domain-optional
    and the identifier drops the domain suffix.
    """

    def __init__(self, references: StackReferences | None = None) -> None:
        self._references = references

    def can_resolve(self, principal: Any) -> bool:
        if principal is None or isinstance(principal, (str, Deferred)):
            return False
        if read_field(principal, "stack") is None or read_field(principal, "name") is None:
            return False
        domain = read_field(principal, "domain")
        return domain is None or isinstance(domain, str)

    def resolve(self, principal: Any, principal_index: int) -> ResolvedPrincipal:
        if self._references is None:
            raise AccessMatrixError(
                "Cross-stack principals need a stack backend; none is configured"
            )
        stack = read_field(principal, "stack")
        name = read_field(principal, "name")
        domain = read_field(principal, "domain")
        version = read_str(principal, "version")
        resource_type = (
            read_str(principal, "resource_type", "resourceType")
            or DEFAULT_PRINCIPAL_RESOURCE_TYPE
        )

        if domain:
            ref = self._references.with_domain(stack, domain, version)
            if is_service_account_alias(resource_type):
                member = service_account_member(ref.get_email(resource_type, name))
            else:
                member = ref.get_member(resource_type, name)
        else:
            opt_ref = self._references.without_domain(stack)
            if is_service_account_alias(resource_type):
                member = service_account_member(opt_ref.get_email(name))
            else:
                member = opt_ref.get_member(name)
            ref = opt_ref

        return ResolvedPrincipal(member=member, identifier=ref.get_identifier(name))


class ResourcePrincipalResolver:
    """Resource handles (service accounts and the like) exposing an email."""

    def can_resolve(self, principal: Any) -> bool:
        if principal is None or isinstance(principal, (str, Deferred)):
            return False
        return has_field(principal, "email") or has_method(principal, "get_email")

    def resolve(self, principal: Any, principal_index: int) -> ResolvedPrincipal:
        email = self._extract_email(principal)
        if email is None or email == "":
            raise AccessMatrixError(
                f"Unsupported inline principal object - cannot derive email from: "
                f"{describe(principal)}"
            )
        return ResolvedPrincipal(
            member=service_account_member(email),
            identifier=self._extract_identifier(principal, email, principal_index),
        )

    @staticmethod
    def _extract_email(principal: Any) -> Any:
        email = read_field(principal, "email")
        if email is not None:
            return email
        if has_method(principal, "get_email"):
            return principal.get_email()
        return None

    def _extract_identifier(self, principal: Any, email: Any, principal_index: int) -> str:
        tagged = read_str(principal, "_logical_name")
        if tagged:
            return tagged

        for accessor in (self._meta_name, self._getter_name, self._provider_name):
            name = accessor(principal)
            if name:
                return name

        plain = read_str(principal, "name")
        if plain:
            return plain

        return self._name_from_email(email) or f"principal-{principal_index}"

    @staticmethod
    def _meta_name(principal: Any) -> str | None:
        meta = getattr(principal, "meta", None) if not isinstance(principal, Mapping) else None
        if not has_method(meta, "get_name"):
            return None
        try:
            name = meta.get_name()
        except Exception:
            logger.debug("meta.get_name() failed on %s", describe(principal), exc_info=True)
            return None
        return name if isinstance(name, str) else None

    @staticmethod
    def _getter_name(principal: Any) -> str | None:
        if not has_method(principal, "get_name"):
            return None
        try:
            name = principal.get_name()
        except Exception:
            logger.debug("get_name() failed on %s", describe(principal), exc_info=True)
            return None
        return name if isinstance(name, str) else None

    @staticmethod
    def _provider_name(principal: Any) -> str | None:
        # Only provider resource instances (carrying a type token) have these.
        if type_tag(principal) is None:
            return None
        opts = read_field(principal, "_opts")
        return read_str(principal, "_resource_name", "_name") or read_str(opts, "name")

    @staticmethod
    def _name_from_email(email: Any) -> str | None:
        if isinstance(email, str):
            return email.split("@")[0] or None
        if isinstance(email, Deferred):
            return email.identifier_hint or hinted_resource_name(email.resources)
        return None


def default_resolvers(
    references: StackReferences | None = None,
) -> list[tuple[str, Any]]:
    """The built-in resolver table, in dispatch order."""
    return [
        ("string", StringPrincipalResolver()),
        ("deferred", DeferredPrincipalResolver()),
        ("cross-stack", CrossStackPrincipalResolver(references)),
        ("resource", ResourcePrincipalResolver()),
    ]
