"""Human-readable resource names for binding operation names."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from accessmatrix_core.helpers import has_method, read_field, read_str
from accessmatrix_core.resources.types import UNKNOWN_RESOURCE_NAME

logger = logging.getLogger(__name__)


def _call_name(target: Any, method: str) -> str | None:
    if not has_method(target, method):
        return None
    try:
        name = getattr(target, method)()
    except Exception:
        logger.debug("%s() failed while naming %r", method, target, exc_info=True)
        return None
    return name if isinstance(name, str) and name else None


def extract_resource_name(resource: Any) -> str:
    """Best-effort name for *resource*; never raises.

    Order: ``meta.get_name()``, ``get_name()``, ``_logical_name``,
    ``_resource_name``, ``_name``, ``_opts.name``, ``name``, then
    ``"unknown-resource"``.
    """
    if resource is None or isinstance(resource, str):
        return UNKNOWN_RESOURCE_NAME

    meta = None if isinstance(resource, Mapping) else getattr(resource, "meta", None)
    name = _call_name(meta, "get_name") or _call_name(resource, "get_name")
    if name:
        return name

    name = read_str(resource, "_logical_name", "_resource_name", "_name")
    if name:
        return name

    name = read_str(read_field(resource, "_opts"), "name")
    if name:
        return name

    return read_str(resource, "name") or UNKNOWN_RESOURCE_NAME
