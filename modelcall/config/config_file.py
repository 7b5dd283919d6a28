"""
Config file loading and management.

{config_root}/config.yaml holds:
- api_keys: literal keys or ${ENV_VAR} references
- providers: named endpoints
- defaults: provider, timeout and retry budget
"""

from pathlib import Path
from typing import Dict, Optional
import yaml

from .schemas import ModelcallConfig, ProviderConfig


CONFIG_FILENAME = "config.yaml"


class ConfigManager:
    """
    Reads and writes config.yaml under a config root.

    Usage:
        manager = ConfigManager(get_config_root())
        config = manager.load()
        manager.add_provider("local", "openai", "llama3", endpoint="http://localhost:8000/v1/chat/completions")
    """

    def __init__(self, config_root: Path):
        self.config_root = Path(config_root).expanduser().resolve()
        self.config_path = self.config_root / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.config_path.exists()

    def load(self) -> ModelcallConfig:
        """Parse config.yaml, or return ModelcallConfig.with_defaults() when there is none."""
        if not self.exists():
            return ModelcallConfig.with_defaults()

        with open(self.config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        return ModelcallConfig.model_validate(data)

    def save(self, config: ModelcallConfig) -> None:
        self.config_root.mkdir(parents=True, exist_ok=True)
        data = config.model_dump(exclude_none=True)

        # Write with temp file for atomicity
        temp_file = self.config_path.with_suffix('.yaml.tmp')
        try:
            with open(temp_file, "w") as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
            temp_file.replace(self.config_path)
        except Exception:
            if temp_file.exists():
                temp_file.unlink()
            raise

    def update(self, updates: dict) -> ModelcallConfig:
        """
        Merge nested updates into the stored config and save it.

        Args:
            updates: Partial config, e.g. {"defaults": {"max_retries": 5}}

        Returns:
            The validated, saved config

        Raises:
            pydantic.ValidationError: If the merged config is invalid (nothing is written)
        """
        data = self.load().model_dump()
        _deep_merge(data, updates)

        merged = ModelcallConfig.model_validate(data)
        self.save(merged)
        return merged

    def set_api_key(self, key_name: str, value: str) -> None:
        """Store a key; prefer a ${ENV_VAR} reference over a literal secret."""
        config = self.load()
        config.api_keys[key_name] = value
        self.save(config)

    def add_provider(
        self,
        name: str,
        provider_type: str,
        model: str,
        endpoint: str = "",
        api_key_ref: Optional[str] = None,
        extra_headers: Optional[Dict[str, str]] = None,
    ) -> None:
        config = self.load()
        config.providers[name] = ProviderConfig(
            type=provider_type,
            endpoint=endpoint,
            model=model,
            api_key_ref=api_key_ref,
            extra_headers=extra_headers or {},
        )
        self.save(config)

    def remove_provider(self, name: str) -> None:
        config = self.load()
        if name not in config.providers:
            raise KeyError(f"Provider '{name}' is not configured")
        if name == config.defaults.provider:
            raise ValueError(f"Provider '{name}' is the default; choose another default first")

        del config.providers[name]
        self.save(config)

    def set_default_provider(self, name: str) -> None:
        config = self.load()
        if name not in config.providers:
            raise KeyError(f"Provider '{name}' is not configured")

        config.defaults.provider = name
        self.save(config)


def _deep_merge(base: dict, updates: dict) -> None:
    """Merge updates into base in place; nested dicts merge, other values replace."""
    for key, value in updates.items():
        if isinstance(base.get(key), dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def load_config_file(config_root: Path) -> ModelcallConfig:
    return ConfigManager(config_root).load()
