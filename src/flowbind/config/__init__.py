"""flowbind configuration."""

from .loader import ConfigLoader, deep_merge, load_config, resolve_env_vars
from .models import EngineConfig, FunctionsConfig, SystemConfig

__all__ = [
    "EngineConfig",
    "FunctionsConfig",
    "SystemConfig",
    "ConfigLoader",
    "load_config",
    "resolve_env_vars",
    "deep_merge",
]
