"""
Configuration management for modelcall.

Config file: {config_root}/config.yaml (config_root from MODELCALL_HOME)

Usage:
    from modelcall.config import ConfigManager, load_client_config

    manager = ConfigManager(config_root)
    file_config = manager.load()

    # Resolve a named provider into immutable client settings
    client_config = load_client_config("openai")
"""

from .schemas import (
    ProviderConfig,
    DefaultsConfig,
    ModelcallConfig,
    ClientConfig,
    resolve_env_vars,
)

from .config_file import (
    ConfigManager,
    load_config_file,
)

from .runtime import (
    ConfigError,
    get_config_root,
    get_config,
    reload_config,
    load_client_config,
)


__all__ = [
    "ProviderConfig",
    "DefaultsConfig",
    "ModelcallConfig",
    "ClientConfig",
    "resolve_env_vars",
    "ConfigManager",
    "load_config_file",
    "ConfigError",
    "get_config_root",
    "get_config",
    "reload_config",
    "load_client_config",
]
