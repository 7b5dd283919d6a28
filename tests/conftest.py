"""Shared fixtures for modelcall tests."""

import pytest

from modelcall.config import ClientConfig
from modelcall.llm.clock import RecordingSleeper
from tests.fakes import FakeResponse, completion_body


@pytest.fixture
def client_config():
    return ClientConfig(
        provider_type="openai",
        endpoint="https://api.example.test/v1/chat/completions",
        api_key="sk-test-secret-key",
        model="test-model",
        temperature=0.2,
        max_tokens=256,
        timeout_seconds=30.0,
        max_retries=3,
    )


@pytest.fixture
def sleeper():
    """Backoff waits are recorded, never slept."""
    return RecordingSleeper()


@pytest.fixture
def ok_response():
    return FakeResponse(200, completion_body())
