"""Loading access matrix definitions from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def load_matrix_file(path: str | Path) -> dict[str, Any]:
    """Parse *path* and return its top-level mapping.

    Raises ValueError for missing files, invalid YAML or a missing
    ``cases`` key.
    """
    path = Path(path)
    if not path.is_file():
        raise ValueError(f"Matrix file not found: {path}")
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw, dict) or "cases" not in raw:
        raise ValueError(f"Invalid matrix file {path}: expected a top-level 'cases' key")
    return raw


def load_cases(path: str | Path) -> Any:
    """The raw ``cases`` value; its structure is checked by validation, not here."""
    return load_matrix_file(path)["cases"]
