"""
Configuration schemas for modelcall.

Two layers:
- ModelcallConfig: the on-disk config file ({config_root}/config.yaml)
  with API keys, named providers and defaults.
- ClientConfig: the resolved, immutable settings one client instance is
  built with (endpoint, credential, timeout, retry limit, ...).
"""

from typing import Dict, Optional, Literal
from pydantic import BaseModel, Field, field_validator
import os
import re


ProviderType = Literal["openai", "openrouter", "azure", "stub"]


class ProviderConfig(BaseModel):
    """A named model endpoint in the config file."""
    type: ProviderType = Field("openai", description="Provider type: openai, openrouter, azure, stub")
    endpoint: str = Field("", description="Chat completions URL (empty for stub)")
    model: str = Field(..., description="Model identifier (e.g., gpt-4o-mini)")
    api_key_ref: Optional[str] = Field(None, description="Reference to api_keys entry (defaults to provider name)")
    temperature: Optional[float] = Field(None, description="Default sampling temperature")
    max_tokens: Optional[int] = Field(None, description="Default max output tokens")
    extra_headers: Dict[str, str] = Field(default_factory=dict, description="Additional request headers")


class DefaultsConfig(BaseModel):
    """Settings shared by every provider unless overridden."""
    provider: str = Field(
        default="openai",
        description="Provider used when none is named"
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Per-request timeout in seconds"
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after transient network failures"
    )


class ModelcallConfig(BaseModel):
    """
    File-level configuration.

    Stored at: {config_root}/config.yaml
    """
    api_keys: Dict[str, str] = Field(
        default_factory=dict,
        description="API keys (can use ${ENV_VAR} syntax)"
    )
    providers: Dict[str, ProviderConfig] = Field(
        default_factory=dict,
        description="Named provider definitions"
    )
    defaults: DefaultsConfig = Field(
        default_factory=DefaultsConfig,
        description="Defaults applied to every provider"
    )

    def resolve_api_key(self, key_name: str) -> Optional[str]:
        """
        Resolve an API key, expanding ${ENV_VAR} references.

        Returns None if key not found or env var not set.
        """
        if key_name not in self.api_keys:
            return None

        value = resolve_env_vars(self.api_keys[key_name])
        return value or None

    def get_provider(self, name: str) -> Optional[ProviderConfig]:
        return self.providers.get(name)

    @classmethod
    def with_defaults(cls) -> "ModelcallConfig":
        """Create a config with sensible defaults."""
        return cls(
            api_keys={
                "openai": "${OPENAI_API_KEY}",
                "openrouter": "${OPENROUTER_API_KEY}",
                "azure": "${AZURE_OPENAI_API_KEY}",
            },
            providers={
                "openai": ProviderConfig(
                    type="openai",
                    endpoint="https://api.openai.com/v1/chat/completions",
                    model="gpt-4o-mini",
                ),
                "openrouter": ProviderConfig(
                    type="openrouter",
                    endpoint="https://openrouter.ai/api/v1/chat/completions",
                    model="google/gemini-2.0-flash-001",
                ),
                "azure": ProviderConfig(
                    type="azure",
                    endpoint="${AZURE_OPENAI_ENDPOINT}",
                    model="gpt-4o-mini",
                ),
                "stub": ProviderConfig(
                    type="stub",
                    model="stub",
                ),
            },
            defaults=DefaultsConfig(),
        )


class ClientConfig(BaseModel):
    """
    Immutable settings for one client instance.

    Everything a WireRequest depends on besides the Query lives here.
    """
    provider_type: ProviderType = Field("openai", description="Selects auth header style and provider variant")
    endpoint: str = Field("", description="Chat completions URL")
    api_key: str = Field("", repr=False, description="Credential, never hardcoded")
    model: str = Field(..., min_length=1, description="Default model identifier")
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(1024, gt=0, description="Default max output tokens (None = omit)")
    timeout_seconds: float = Field(60.0, gt=0, description="Per-request timeout in seconds")
    max_retries: int = Field(3, ge=0, le=10, description="Retries after transient network failures")
    backoff_base: float = Field(2.0, gt=1.0, description="Backoff before retry n is base ** (n + 1) seconds")
    backoff_jitter: float = Field(0.0, ge=0.0, description="Max random seconds added to each backoff")
    pool_connections: int = Field(10, ge=1)
    pool_maxsize: int = Field(10, ge=1)
    max_workers: int = Field(4, ge=1, description="Threads for call_async")
    io_workers: int = Field(16, ge=1, description="Threads for in-flight requests, abandoned ones included")
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    site_url: str = Field("", description="HTTP-Referer for openrouter attribution")
    site_name: str = Field("modelcall", description="X-Title for openrouter attribution")

    @field_validator('endpoint')
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        # Empty is allowed for the stub provider; load_client_config requires it otherwise
        v = v.strip()
        if v and not re.match(r'^https?://[^/?#\s:]+', v):
            raise ValueError(f"endpoint must be an http(s) URL with a host, got: {v!r}")
        return v

    @field_validator('api_key')
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        return v.strip()

    model_config = {
        "frozen": True,
        "validate_assignment": True
    }


def resolve_env_vars(value: str) -> str:
    """
    Resolve ${ENV_VAR} references in a string.

    Examples:
        "${OPENAI_API_KEY}" -> actual value from environment
        "literal-value" -> "literal-value"
        "${MISSING_VAR}" -> "" (empty string if not set)
    """
    if not isinstance(value, str):
        return value

    # Pattern matches ${VAR_NAME}
    pattern = r'\$\{([^}]+)\}'

    def replace(match):
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return re.sub(pattern, replace, value)
