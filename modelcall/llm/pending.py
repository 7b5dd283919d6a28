#!/usr/bin/env python3
from concurrent.futures import CancelledError, Future
from typing import Callable

from modelcall.llm.cancellation import CancelToken
from modelcall.llm.models import CallFailure, CallOutcome, FailureKind


class PendingCall:
    """
    Handle for a call running on a background thread.

    cancel() signals the call's CancelToken, which the retry loop observes at
    the network wait and at backoff waits. A call cancelled before it started
    never runs. Either way result() returns a cancellation CallFailure instead
    of raising CancelledError.
    """

    def __init__(self, future: Future, cancel: CancelToken):
        self.future = future
        self.token = cancel

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self.token.cancel(reason)
        self.future.cancel()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: float = None) -> CallOutcome:
        """
        Wait for the outcome.

        Raises:
            concurrent.futures.TimeoutError: If `timeout` elapses first. The
                call keeps running; cancel() it to stop it.
        """
        try:
            return self.future.result(timeout)
        except CancelledError:
            return CallFailure(
                kind=FailureKind.CANCELLATION_FAILURE,
                message=self.token.reason or "cancelled before start",
                attempts=0
            )

    def add_done_callback(self, fn: Callable[["PendingCall"], None]) -> None:
        self.future.add_done_callback(lambda _: fn(self))

    def __repr__(self):
        state = "done" if self.done() else "pending"
        return f"PendingCall({state}, cancelled={self.token.cancelled})"
