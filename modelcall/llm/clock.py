#!/usr/bin/env python3
"""
Wait primitives for retry backoff.

RetryPolicy never calls time.sleep directly. It goes through a Sleeper so
tests can record backoff durations without waiting on the wall clock.
"""

import threading
from abc import ABC, abstractmethod
from typing import List, Optional

from modelcall.llm.cancellation import CancelToken
from modelcall.llm.errors import CallCancelled


class Sleeper(ABC):

    @abstractmethod
    def sleep(self, seconds: float, cancel: Optional[CancelToken] = None) -> None:
        """Wait `seconds`. Raises CallCancelled if `cancel` fires during the wait."""
        raise NotImplementedError


class EventSleeper(Sleeper):
    """Real wall-clock waits that wake immediately on cancellation."""

    def sleep(self, seconds: float, cancel: Optional[CancelToken] = None) -> None:
        if cancel is None:
            threading.Event().wait(seconds)
            return

        if cancel.wait(seconds):
            raise CallCancelled(cancel.reason or "cancelled during backoff")


class RecordingSleeper(Sleeper):
    """
    Sleeper that returns immediately and records requested durations.

    Used by tests and by dry runs where backoff timing must be observable
    but not actually waited out.
    """

    def __init__(self):
        self.calls: List[float] = []

    def sleep(self, seconds: float, cancel: Optional[CancelToken] = None) -> None:
        self.calls.append(seconds)
        if cancel is not None and cancel.cancelled:
            raise CallCancelled(cancel.reason or "cancelled during backoff")
