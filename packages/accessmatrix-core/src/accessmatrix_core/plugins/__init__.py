"""Dynamic plugin discovery and loading."""

from accessmatrix_core.plugins.loader import PluginLoader, PluginLoadError

__all__ = ["PluginLoadError", "PluginLoader"]
