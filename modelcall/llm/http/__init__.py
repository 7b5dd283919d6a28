"""
HTTP call pipeline components.

Clean separation of concerns:
- transport.py: HTTP requests over a shared session
- retry_policy.py: Retry state machine with backoff
- response_parser.py: Response decoding and failure classification
"""

from modelcall.llm.errors import TransportError, CallCancelled
from .http_session import create_session
from .transport import HttpTransport
from .retry_policy import RetryPolicy, RetryOutcome
from .response_parser import ResponseParser

__all__ = [
    'TransportError',
    'CallCancelled',
    'create_session',
    'HttpTransport',
    'RetryPolicy',
    'RetryOutcome',
    'ResponseParser',
]
