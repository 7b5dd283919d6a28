"""
Runtime configuration access.

Single source of truth: {config_root}/config.yaml

MODELCALL_HOME locates the config root. Credentials are referenced from the
file as ${ENV_VAR} and resolved from the environment (a local .env is
loaded first), so no key ever needs to live in source or in the file itself.
"""

import os
from pathlib import Path
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from .schemas import ClientConfig, ModelcallConfig, resolve_env_vars

load_dotenv()


class ConfigError(Exception):
    """Configuration is missing or inconsistent (unknown provider, missing key)."""


def get_config_root() -> Path:
    """Get the config root from environment."""
    return Path(os.getenv('MODELCALL_HOME', '~/.config/modelcall')).expanduser().resolve()


@lru_cache(maxsize=1)
def get_config() -> ModelcallConfig:
    """
    Load and cache the configuration.

    Returns ModelcallConfig with defaults if config.yaml doesn't exist.
    """
    from .config_file import load_config_file
    return load_config_file(get_config_root())


def reload_config() -> ModelcallConfig:
    """Force reload of config (clears cache)."""
    get_config.cache_clear()
    return get_config()


def load_client_config(
    provider: Optional[str] = None,
    config: Optional[ModelcallConfig] = None,
    **overrides
) -> ClientConfig:
    """
    Resolve a named provider into a ClientConfig.

    Args:
        provider: Provider name from the config file (default: defaults.provider)
        config: Config to resolve against (default: get_config())
        **overrides: ClientConfig fields to override; None values are ignored

    Raises:
        ConfigError: Unknown provider, or missing credential/endpoint
    """
    config = config or get_config()
    name = provider or config.defaults.provider

    entry = config.get_provider(name)
    if entry is None:
        configured = ', '.join(sorted(config.providers)) or '(none)'
        raise ConfigError(f"Unknown provider '{name}'. Configured providers: {configured}")

    api_key = ""
    endpoint = resolve_env_vars(entry.endpoint)
    if entry.type != "stub":
        key_name = entry.api_key_ref or name
        api_key = config.resolve_api_key(key_name) or ""
        if not api_key:
            raise ConfigError(
                f"API key '{key_name}' not configured for provider '{name}'. "
                f"Set the referenced environment variable or run: modelcall config init"
            )
        if not endpoint:
            raise ConfigError(f"Provider '{name}' has no endpoint configured")

    values = {
        "provider_type": entry.type,
        "endpoint": endpoint,
        "api_key": api_key,
        "model": entry.model,
        "timeout_seconds": config.defaults.timeout_seconds,
        "max_retries": config.defaults.max_retries,
        "extra_headers": entry.extra_headers,
    }
    if entry.temperature is not None:
        values["temperature"] = entry.temperature
    if entry.max_tokens is not None:
        values["max_tokens"] = entry.max_tokens

    values.update({k: v for k, v in overrides.items() if v is not None})
    return ClientConfig(**values)
