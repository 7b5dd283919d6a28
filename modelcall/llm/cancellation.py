#!/usr/bin/env python3
"""Caller-held cancellation and deadline signal."""

import threading
import time
from typing import Optional


class CancelToken:
    """
    Thread-safe cancellation signal with an optional deadline.

    A token is cancelled either explicitly via cancel() or implicitly once
    its deadline (monotonic clock) has passed. Waiting on a token returns as
    soon as it is cancelled, which is what lets backoff waits and network
    waits abort promptly.

    Example:
        >>> token = CancelToken.with_deadline(30.0)
        >>> result = client.call(Query("Hello"), cancel=token)
    """

    def __init__(self, deadline: Optional[float] = None):
        """
        Args:
            deadline: Absolute time.monotonic() value after which the token
                      counts as cancelled (None = no deadline)
        """
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None
        self.deadline = deadline

    @classmethod
    def with_deadline(cls, seconds: float) -> "CancelToken":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self, reason: str = "cancelled by caller"):
        with self._lock:
            if self._reason is None:
                self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self.deadline is not None and time.monotonic() >= self.deadline:
            self.cancel("deadline exceeded")
            return True
        return False

    @property
    def reason(self) -> Optional[str]:
        with self._lock:
            return self._reason

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, 0.0 once passed, None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def wait(self, seconds: float) -> bool:
        """
        Block for up to `seconds`, waking early on cancellation.

        Returns:
            True if the token is cancelled when the wait ends
        """
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._event.wait(remaining)
        else:
            self._event.wait(seconds)
        return self.cancelled

    def __repr__(self):
        return f"CancelToken(cancelled={self.cancelled}, reason={self.reason!r})"
