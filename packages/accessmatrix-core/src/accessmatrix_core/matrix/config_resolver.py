"""Per-case principal lists from the external configuration store."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError

from accessmatrix_core.config.models import AccessMatrixSettings

logger = logging.getLogger(__name__)


class CrossStackPrincipalEntry(BaseModel):
    """``{stack, name, domain?, version?, resource_type?}`` as written in config."""

    stack: str
    name: str
    domain: str | None = None
    version: str | None = None
    resource_type: str = Field(
        default="account",
        validation_alias=AliasChoices("resource_type", "resourceType"),
    )


PrincipalEntry = Union[str, CrossStackPrincipalEntry]

_entries_adapter = TypeAdapter(list[PrincipalEntry])


class ConfigResolver:
    """Validates the configured principals of each case.

    Malformed lists never fail the run: they are logged and replaced by an
    empty list so the case still proceeds with its own principals.
    """

    def __init__(
        self,
        principals_config: Mapping[str, Any] | None = None,
        settings: AccessMatrixSettings | None = None,
    ) -> None:
        self.settings = settings or AccessMatrixSettings()
        if principals_config is None:
            principals_config = self.settings.principals
        self._config: dict[str, Any] = dict(principals_config)

    def resolve(self, case_name: str) -> list[Any]:
        raw = self._config.get(case_name)
        if raw is None:
            return []

        if not isinstance(raw, list):
            if self.settings.enable_detailed_logging:
                logger.warning(
                    "Expected a list of principals for case '%s', got %s. Skipping configuration.",
                    case_name,
                    type(raw).__name__,
                )
            return []

        if len(raw) > self.settings.max_principals_threshold:
            logger.warning(
                "Case '%s' has %d configured principals. This may impact performance.",
                case_name,
                len(raw),
            )

        try:
            entries = _entries_adapter.validate_python(raw)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            logger.warning(
                "Invalid principal configuration for case '%s': %s. Using empty principal list.",
                case_name,
                details,
            )
            return []

        if entries and self.settings.enable_detailed_logging:
            logger.info(
                "Validated %d configured principals for case '%s'", len(entries), case_name
            )
        return [
            e if isinstance(e, str) else e.model_dump(exclude_none=True) for e in entries
        ]

    def has_config(self, case_name: str) -> bool:
        return case_name in self._config

    def configured_cases(self) -> list[str]:
        return list(self._config)

    def raw_config(self) -> dict[str, Any]:
        return dict(self._config)
