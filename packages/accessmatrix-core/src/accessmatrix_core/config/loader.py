"""Locate and read accessmatrix.yaml.

Search order: the ``--config`` path, ``./accessmatrix.yaml``, then
``~/.accessmatrix/config.yaml``. The first file with content wins; an empty
file is skipped. ``${VAR}`` anywhere in a string value is replaced from the
environment (unset variables become empty strings).
"""

import os
import re
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import AccessMatrixConfig

CONFIG_FILENAME = "accessmatrix.yaml"

_ENV_REF = re.compile(r"\$\{(\w+)\}")


def config_search_paths(cli_path: str | None = None) -> Iterator[Path]:
    if cli_path:
        yield Path(cli_path)
    yield Path(".") / CONFIG_FILENAME
    yield Path.home() / ".accessmatrix" / "config.yaml"


def load_config(cli_path: str | None = None) -> AccessMatrixConfig:
    """First non-empty config file on the search path, else the defaults."""
    for path in config_search_paths(cli_path):
        if not path.is_file():
            continue
        raw = _read_mapping(path)
        if raw is None:
            continue
        try:
            return AccessMatrixConfig.model_validate(_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
    return AccessMatrixConfig()


def _read_mapping(path: Path) -> dict[str, Any] | None:
    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {path}: top level must be a mapping")
    return raw


def _expand_env_vars(value: Any) -> Any:
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {key: _expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


# Default YAML template for `accessmatrix config init`
DEFAULT_CONFIG_TEMPLATE = """\
# accessmatrix.yaml

# Binding generation
access_matrix:
  max_resource_name_length: 100
  enable_detailed_logging: true
  max_principals_threshold: 100
  max_rules_per_case: 50
  principal_cache_size: 1000
  default_operation_timeout: 30000   # ms, passed through to the deployment engine
  # Principals applied to every rule of a case
  principals: {}
  #   storage-readers:
  #     - "group:readers@example.com"
  #     - { stack: "acme/platform/prod", name: "ci-runner", domain: "build" }

# Cross-stack references
reference:
  # default_output_key: "resources"
  stack_cache_size: 100
  state_dir: ".accessmatrix/stacks"  # <org>/<project>/<env>.yaml

# `accessmatrix validate` thresholds
validation:
  max_cases: 20
  max_rules_per_case: 50
  max_principals: 100

# Entry-point plugins
plugins:
  enabled: false
  disabled: []

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
