"""Use cases and policy rules as parsed from matrix input."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from accessmatrix_core.errors import AccessMatrixError
from accessmatrix_core.helpers import read_field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicyRule:
    """One grant: *role* on *resource* for the rule's principals.

    ``principals`` is kept as given (a list, a single value, a bulk
    container or None); the processor expands it. ``label`` replaces the
    role segment of generated binding names.
    """

    resource: Any
    role: Any
    principals: Any = None
    label: str | None = None

    @classmethod
    def from_input(cls, raw: Any) -> PolicyRule:
        if isinstance(raw, PolicyRule):
            return raw
        resource = read_field(raw, "resource")
        if resource is None:
            raise AccessMatrixError("Policy rule is missing required field 'resource'")
        role = read_field(raw, "role")
        if role is None or (isinstance(role, str) and not role.strip()):
            raise AccessMatrixError("Policy rule is missing required field 'role'")
        label = read_field(raw, "label")
        return cls(
            resource=resource,
            role=role,
            principals=read_field(raw, "principals"),
            label=label if isinstance(label, str) and label else None,
        )


@dataclass(frozen=True)
class UseCase:
    """A named bundle of raw rules plus optional case-level principals."""

    name: str
    rules: tuple[Any, ...] = ()
    principals: Any = None

    @classmethod
    def from_input(cls, raw: Any, name: str) -> UseCase:
        """Normalize a case value.

        A list is the rule list itself; a mapping must carry ``rules``.
        Anything else is logged and treated as a case without rules.
        """
        if isinstance(raw, UseCase):
            return raw
        if isinstance(raw, (list, tuple)):
            return cls(name, tuple(raw))
        if isinstance(raw, Mapping) and "rules" in raw:
            rules = raw["rules"]
            if not isinstance(rules, (list, tuple)):
                raise AccessMatrixError(
                    f"Invalid use case structure for '{name}': rules must be a list"
                )
            return cls(name, tuple(rules), raw.get("principals"))

        logger.warning(
            "Received an invalid value for use case '%s'. "
            "It should be a list of rules or a mapping with 'rules'.",
            name,
        )
        return cls(name)
