#!/usr/bin/env python3
"""
Data models for model calls.

Defines the query, wire-level request/response containers and the two
mutually exclusive call outcomes (ModelResult, CallFailure).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class FailureKind(str, Enum):
    """Why a call did not produce a ModelResult."""
    NETWORK_FAILURE = "network_failure"          # Transport failed, retries exhausted
    CANCELLATION_FAILURE = "cancellation_failure"  # Caller cancelled or deadline passed
    HTTP_ERROR = "http_error"                    # Response status >= 400
    MALFORMED_RESPONSE = "malformed_response"    # Body is not the expected JSON shape
    EMPTY_RESULT = "empty_result"                # Well-formed but no answer text


class RetryState(str, Enum):
    """States of the retry loop in RetryPolicy."""
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    EXHAUSTED_RETRIES = "exhausted_retries"
    NON_RETRYABLE = "non_retryable"


@dataclass(frozen=True)
class Query:
    content: str
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


@dataclass(frozen=True)
class WireRequest:
    url: str
    headers: Mapping[str, str]
    body: bytes
    timeout: float
    trace_id: str


@dataclass(frozen=True)
class WireResponse:
    status_code: int
    body: bytes
    elapsed: float
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ModelResult:
    """
    Parsed answer from the model API.

    Attributes:
        id: Completion identifier assigned by the API
        created: Unix timestamp of the completion
        content: Answer text from choices[0].message.content
        model: Model reported by the API (if present)
        usage: Token usage dict exactly as returned (if present)
    """
    id: str
    created: int
    content: str
    model: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class CallFailure:
    """
    Classified non-success outcome of a call.

    Attributes:
        kind: Failure category
        message: Short technical description (not meant for end users)
        status_code: HTTP status for http_error failures
        body_excerpt: Leading part of the response body for http_error failures
        cause: Underlying exception, if any
        attempts: Number of transport attempts made
        retry_after: Seconds from a Retry-After header, if the API sent one
    """
    kind: FailureKind
    message: str
    status_code: Optional[int] = None
    body_excerpt: Optional[str] = None
    cause: Optional[BaseException] = field(default=None, repr=False, compare=False)
    attempts: int = 0
    retry_after: Optional[int] = None

    @property
    def success(self) -> bool:
        return False


CallOutcome = Union[ModelResult, CallFailure]
