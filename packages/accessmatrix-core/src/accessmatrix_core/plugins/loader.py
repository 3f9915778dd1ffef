"""Third-party resource handlers, builders and resolvers via entry points."""

from __future__ import annotations

import importlib.metadata
import logging
from typing import TYPE_CHECKING, Any

from accessmatrix_core.errors import AccessMatrixError

if TYPE_CHECKING:
    from accessmatrix_core.builders.registry import IamBuilderRegistry
    from accessmatrix_core.config.models import AccessMatrixConfig
    from accessmatrix_core.principals.chain import PrincipalResolverChain
    from accessmatrix_core.resources.registry import ResourceTypeRegistry

logger = logging.getLogger(__name__)


class PluginLoadError(AccessMatrixError):
    """Raised when an entry point cannot be loaded or does not fit its group."""

    def __init__(self, group: str, name: str, cause: Exception | str):
        self.group = group
        self.name = name
        super().__init__(f"Failed to load plugin '{name}' from group '{group}': {cause}")
        if isinstance(cause, Exception):
            self.__cause__ = cause


class PluginLoader:
    """Discovers and installs plugins registered under the accessmatrix entry point groups.

    Handler classes declare ``supported_type`` and builder classes declare
    ``resource_type``; both are registered as factories. Resolver classes
    are instantiated and appended to the chain under the entry point name.
    """

    # Entry point group names
    GROUPS = {
        "resource_handlers": "accessmatrix.resource_handlers",
        "iam_builders": "accessmatrix.iam_builders",
        "principal_resolvers": "accessmatrix.principal_resolvers",
    }

    def __init__(self, config: AccessMatrixConfig):
        self._config = config

    def discover(self) -> dict[str, list[str]]:
        """Scan entry_points for registered plugins. Returns {kind: [name, ...]}."""
        result: dict[str, list[str]] = {}
        for kind, group in self.GROUPS.items():
            eps = importlib.metadata.entry_points(group=group)
            result[kind] = [ep.name for ep in eps]
        return result

    def _enabled_entry_points(self, kind: str) -> list[Any]:
        disabled = set(self._config.plugins.disabled)
        eps = importlib.metadata.entry_points(group=self.GROUPS[kind])
        return [ep for ep in eps if ep.name not in disabled]

    def _load(self, kind: str, ep: Any) -> Any:
        try:
            return ep.load()
        except Exception as e:
            raise PluginLoadError(self.GROUPS[kind], ep.name, e) from e

    @staticmethod
    def _declared(group: str, name: str, plugin: Any, attr: str) -> str:
        value = getattr(plugin, attr, None)
        if not isinstance(value, str) or not value:
            raise PluginLoadError(group, name, f"plugin does not declare '{attr}'")
        return value

    def install(
        self,
        resources: ResourceTypeRegistry,
        builders: IamBuilderRegistry,
        principals: PrincipalResolverChain,
    ) -> dict[str, list[str]]:
        """Register every enabled plugin. No-op unless ``plugins.enabled`` is set."""
        installed: dict[str, list[str]] = {kind: [] for kind in self.GROUPS}
        if not self._config.plugins.enabled:
            return installed

        for ep in self._enabled_entry_points("resource_handlers"):
            plugin = self._load("resource_handlers", ep)
            group = self.GROUPS["resource_handlers"]
            resources.register(self._declared(group, ep.name, plugin, "supported_type"), plugin)
            installed["resource_handlers"].append(ep.name)

        for ep in self._enabled_entry_points("iam_builders"):
            plugin = self._load("iam_builders", ep)
            group = self.GROUPS["iam_builders"]
            builders.register(self._declared(group, ep.name, plugin, "resource_type"), plugin)
            installed["iam_builders"].append(ep.name)

        for ep in self._enabled_entry_points("principal_resolvers"):
            plugin = self._load("principal_resolvers", ep)
            try:
                principals.register(ep.name, plugin() if isinstance(plugin, type) else plugin)
            except TypeError as e:
                raise PluginLoadError(self.GROUPS["principal_resolvers"], ep.name, e) from e
            installed["principal_resolvers"].append(ep.name)

        for kind, names in installed.items():
            if names:
                logger.info("Installed %s plugins: %s", kind, ", ".join(names))
        return installed
