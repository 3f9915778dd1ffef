"""Resource type discovery and handler dispatch."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from accessmatrix_core.errors import DiscoveryError, NotSupportedError
from accessmatrix_core.helpers import describe, has_method, type_tag
from accessmatrix_core.interfaces.resource import ResourceHandler, ResourceInfo
from accessmatrix_core.resources.handlers import DEFAULT_HANDLERS
from accessmatrix_core.resources.naming import extract_resource_name
from accessmatrix_core.resources.types import DISCOVERY_GETTERS

logger = logging.getLogger(__name__)

HandlerFactory = Callable[[], ResourceHandler]


class ResourceTypeRegistry:
    """Maps resource values to per-type handlers.

    Discovery reads the value's own type token first, then calls each
    getter in ``getters`` order and takes the token of the first returned
    value that has one. Getter exceptions are skipped. Handler instances
    are created on first use and cached per type.
    """

    def __init__(
        self,
        handlers: Mapping[str, HandlerFactory] | None = None,
        getters: Iterable[str] = DISCOVERY_GETTERS,
    ) -> None:
        self._factories: dict[str, HandlerFactory] = dict(handlers or {})
        self._instances: dict[str, ResourceHandler] = {}
        self.getters = tuple(getters)

    @classmethod
    def with_defaults(cls) -> ResourceTypeRegistry:
        return cls(DEFAULT_HANDLERS)

    # -- Registration -------------------------------------------------------

    def register(self, resource_type: str, factory: HandlerFactory) -> None:
        self._factories[resource_type] = factory
        self._instances.pop(resource_type, None)

    def registered_types(self) -> list[str]:
        return list(self._factories)

    def clear_cache(self) -> None:
        self._instances.clear()

    def clear(self) -> None:
        self._factories.clear()
        self._instances.clear()

    @property
    def cache_size(self) -> int:
        return len(self._instances)

    # -- Discovery ----------------------------------------------------------

    def discover_type(self, resource: Any) -> str:
        """Return the canonical type token of *resource* or raise DiscoveryError."""
        if resource is None or isinstance(resource, (str, int, float, bool)):
            raise DiscoveryError(describe(resource))

        tag = type_tag(resource)
        if tag:
            return tag

        for getter in self.getters:
            if not has_method(resource, getter):
                continue
            try:
                nested = getattr(resource, getter)()
            except Exception:
                logger.debug("Getter %s failed during type discovery", getter, exc_info=True)
                continue
            tag = type_tag(nested)
            if tag:
                return tag

        raise DiscoveryError(describe(resource))

    def get_handler(self, resource: Any) -> ResourceHandler:
        resource_type = self.discover_type(resource)
        return self.get_handler_for_type(resource_type)

    def get_handler_for_type(self, resource_type: str) -> ResourceHandler:
        cached = self._instances.get(resource_type)
        if cached is not None:
            return cached
        factory = self._factories.get(resource_type)
        if factory is None:
            raise NotSupportedError(resource_type, self.registered_types())
        handler = factory()
        self._instances[resource_type] = handler
        logger.debug("Created handler %r", handler)
        return handler

    def is_supported(self, resource: Any) -> bool:
        try:
            self.get_handler(resource)
        except (DiscoveryError, NotSupportedError):
            return False
        return True

    # -- Extraction ---------------------------------------------------------

    def extract_resource_info(self, resource: Any) -> ResourceInfo:
        return self.get_handler(resource).extract_resource_info(resource)

    @staticmethod
    def get_resource_name(resource: Any) -> str:
        return extract_resource_name(resource)
