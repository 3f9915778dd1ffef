from .loader import DEFAULT_CONFIG_TEMPLATE, load_config
from .models import (
    AccessMatrixConfig,
    AccessMatrixSettings,
    PluginsConfig,
    ReferenceConfig,
    ValidationConfig,
)

__all__ = [
    "DEFAULT_CONFIG_TEMPLATE",
    "AccessMatrixConfig",
    "AccessMatrixSettings",
    "PluginsConfig",
    "ReferenceConfig",
    "ValidationConfig",
    "load_config",
]
