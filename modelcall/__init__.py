"""
modelcall - resilient client for chat completion model APIs.

    from modelcall import Query, create_provider, load_client_config

    with create_provider(load_client_config("openai")) as provider:
        outcome = provider.call(Query("Hello"))
        if outcome.success:
            print(outcome.content)
"""

from modelcall.config import ClientConfig, ConfigError, load_client_config
from modelcall.llm import (
    Query,
    ModelResult,
    CallFailure,
    FailureKind,
    CancelToken,
    PendingCall,
    ModelProvider,
    ModelCallClient,
    StubModelProvider,
    create_provider,
)

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "ConfigError",
    "load_client_config",
    "Query",
    "ModelResult",
    "CallFailure",
    "FailureKind",
    "CancelToken",
    "PendingCall",
    "ModelProvider",
    "ModelCallClient",
    "StubModelProvider",
    "create_provider",
]
