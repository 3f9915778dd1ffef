"""Stack outputs read from YAML files: ``<state_dir>/<org>/<project>/<env>.yaml``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from accessmatrix_core.deferred import Deferred
from accessmatrix_core.errors import InvalidStackOutputError, StackNotFoundError
from accessmatrix_core.reference import parse_stack

logger = logging.getLogger(__name__)


class YamlStackHandle:
    """Outputs of one stack; the file is read when the value is first resolved."""

    def __init__(self, name: str, stack: str, path: Path) -> None:
        self.name = name
        self.stack = stack
        self.path = path
        self._outputs = Deferred(self._read)

    def _read(self) -> dict[str, Any]:
        if not self.path.is_file():
            raise StackNotFoundError(self.stack)
        logger.debug("Reading stack outputs for %s from %s", self.stack, self.path)
        try:
            with open(self.path) as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidStackOutputError(f"Invalid YAML in {self.path}: {e}") from e
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise InvalidStackOutputError(
                f"Stack outputs in {self.path} must be a mapping, got {type(raw).__name__}"
            )
        return raw

    def outputs(self) -> Deferred[dict[str, Any]]:
        return self._outputs

    def get_output(self, key: str) -> Deferred[Any]:
        return self._outputs.apply(lambda outputs: outputs.get(key))

    def __repr__(self) -> str:
        return f"YamlStackHandle({self.name!r}, {str(self.path)!r})"


class YamlStackBackend:
    """Opens stacks recorded as YAML files under *state_dir*."""

    def __init__(self, state_dir: str | Path) -> None:
        self.state_dir = Path(state_dir)

    def path_for(self, stack: str) -> Path:
        s = parse_stack(stack)
        return self.state_dir / s.organization / s.project / f"{s.environment}.yaml"

    def open(self, name: str, stack: str) -> YamlStackHandle:
        return YamlStackHandle(name, stack, self.path_for(stack))
