"""
Model provider variants.

- ModelProvider: Abstract call capability (call / call_async)
- StubModelProvider: Deterministic fake model (default for tests/offline)
- ModelCallClient (modelcall.llm.client): HTTP client for OpenAI-compatible APIs
"""

from .base import ModelProvider
from .stub import StubModelProvider

__all__ = [
    "ModelProvider",
    "StubModelProvider",
]
