"""Orchestrates every use case of an access matrix into binding operations."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from accessmatrix_core.config.models import AccessMatrixSettings
from accessmatrix_core.errors import AccessMatrixError, CaseProcessingError
from accessmatrix_core.interfaces.builder import BindingOperation
from accessmatrix_core.matrix.config_resolver import ConfigResolver
from accessmatrix_core.matrix.models import UseCase
from accessmatrix_core.matrix.processor import PolicyRuleProcessor

logger = logging.getLogger(__name__)


class AccessMatrix:
    """Processes *cases* on construction, sequentially and in mapping order.

    A failing case raises CaseProcessingError; operations from cases
    processed before it are discarded with the instance.
    """

    def __init__(
        self,
        cases: Mapping[str, Any],
        processor: PolicyRuleProcessor,
        config_resolver: ConfigResolver | None = None,
        settings: AccessMatrixSettings | None = None,
    ) -> None:
        if cases is None or not isinstance(cases, Mapping):
            raise AccessMatrixError("Access matrix cases must be a non-null mapping")

        self.settings = settings or processor.settings
        self.processor = processor
        self.config_resolver = config_resolver or ConfigResolver(settings=self.settings)
        self._bindings: list[BindingOperation] = []

        if not cases:
            logger.warning("No cases provided. No IAM bindings will be created.")
        self._log_info("Initializing with %d cases", len(cases))

        start = time.monotonic()
        try:
            self._process_cases(cases)
        except AccessMatrixError as exc:
            logger.error("Failed to initialize: %s", exc)
            raise
        self._log_info(
            "Completed initialization in %dms. Created %d IAM bindings.",
            (time.monotonic() - start) * 1000,
            len(self._bindings),
        )

    # ---------------------------------------------------------------------------
    # Processing
    # ---------------------------------------------------------------------------

    def _process_cases(self, cases: Mapping[str, Any]) -> None:
        total = len(cases)
        for index, (case_name, raw_case) in enumerate(cases.items()):
            if not isinstance(case_name, str) or not case_name:
                logger.warning("Skipping invalid case name at index %d", index)
                continue
            self._log_info("Processing case '%s' (%d/%d)", case_name, index + 1, total)
            self._process_case(case_name, raw_case)

    def _process_case(self, case_name: str, raw_case: Any) -> None:
        start = time.monotonic()
        try:
            config_principals = self.config_resolver.resolve(case_name)
            use_case = UseCase.from_input(raw_case, case_name)

            if not use_case.rules:
                self._log_info("Case '%s' has no rules, skipping", case_name)
                return

            operations = self.processor.process_use_case(use_case, config_principals, case_name)
        except Exception as exc:
            raise CaseProcessingError(case_name, exc) from exc

        self._bindings.extend(operations)
        if self.settings.enable_detailed_logging:
            logger.info(
                "Processed case '%s' with %d IAM bindings in %dms",
                case_name,
                len(operations),
                (time.monotonic() - start) * 1000,
            )
        else:
            logger.info("Processed case '%s' with %d IAM bindings", case_name, len(operations))

    def _log_info(self, msg: str, *args: Any) -> None:
        if self.settings.enable_detailed_logging:
            logger.info(msg, *args)

    # ---------------------------------------------------------------------------
    # Accessors
    # ---------------------------------------------------------------------------

    @property
    def bindings(self) -> list[BindingOperation]:
        return list(self._bindings)

    @property
    def binding_count(self) -> int:
        return len(self._bindings)

    def config_info(self) -> dict[str, Any]:
        return {
            "configured_cases": self.config_resolver.configured_cases(),
            "raw_config": self.config_resolver.raw_config(),
        }
