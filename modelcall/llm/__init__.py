"""
Model call subsystem.

Provides:
- ModelCallClient: HTTP calls with retry, backoff and response classification
- StubModelProvider: Deterministic offline provider
- create_provider: Configuration-time provider selection
- Data models: Query, ModelResult, CallFailure and wire containers
- CancelToken / PendingCall: Cancellation and async call handles
"""

from modelcall.llm.models import (
    Query,
    WireRequest,
    WireResponse,
    ModelResult,
    CallFailure,
    CallOutcome,
    FailureKind,
    RetryState,
)
from modelcall.llm.cancellation import CancelToken
from modelcall.llm.pending import PendingCall
from modelcall.llm.request_builder import build_request
from modelcall.llm.providers import ModelProvider, StubModelProvider
from modelcall.llm.client import ModelCallClient
from modelcall.llm.factory import create_provider

__all__ = [
    "Query",
    "WireRequest",
    "WireResponse",
    "ModelResult",
    "CallFailure",
    "CallOutcome",
    "FailureKind",
    "RetryState",
    "CancelToken",
    "PendingCall",
    "build_request",
    "ModelProvider",
    "StubModelProvider",
    "ModelCallClient",
    "create_provider",
]
