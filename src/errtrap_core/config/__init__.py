"""errtrap configuration - Config loading and models."""

from .loader import (
    CONFIG_PATH_ENV,
    ConfigLoader,
    get_config_loader,
    load_config,
    resolve_env_vars,
)
from .models import SENTINEL_CONTEXT, EngineConfig, ErrtrapConfig, LoggingConfig

__all__ = [
    # Config models
    "ErrtrapConfig",
    "EngineConfig",
    "LoggingConfig",
    "SENTINEL_CONTEXT",
    # Loader
    "ConfigLoader",
    "CONFIG_PATH_ENV",
    "get_config_loader",
    "load_config",
    "resolve_env_vars",
]
