#!/usr/bin/env python3
import random
from dataclasses import dataclass
from typing import Callable, Optional

from modelcall.logger import CallLogger, create_logger
from modelcall.llm.cancellation import CancelToken
from modelcall.llm.clock import EventSleeper, Sleeper
from modelcall.llm.models import CallFailure, FailureKind, RetryState, WireResponse
from modelcall.llm.errors import CallCancelled, TransportError


@dataclass(frozen=True)
class RetryOutcome:
    """Terminal state of one retry sequence: a response or a failure, never both."""
    state: RetryState
    attempts: int
    response: Optional[WireResponse] = None
    failure: Optional[CallFailure] = None


class RetryPolicy:
    """
    Retry loop over transport attempts.

    States: ATTEMPTING(n) -> SUCCEEDED | EXHAUSTED_RETRIES | NON_RETRYABLE.
    Only retryable TransportErrors are retried. Any received response
    (including 4xx/5xx) ends the loop as SUCCEEDED. Cancellation ends it as
    NON_RETRYABLE regardless of the attempt count, even when the deadline
    surfaced as a transport timeout. A request that cannot be sent at all
    (TransportError.retryable is False) is NON_RETRYABLE on the first attempt.

    Backoff before retry n (0-indexed) is backoff_base ** (n + 1) seconds,
    plus uniform jitter in [0, backoff_jitter] when jitter is configured.
    """

    def __init__(
        self,
        max_retries: int = 3,
        backoff_base: float = 2.0,
        backoff_jitter: float = 0.0,
        sleeper: Optional[Sleeper] = None,
        logger: Optional[CallLogger] = None,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_jitter = backoff_jitter
        self.sleeper = sleeper or EventSleeper()
        self.logger = logger or create_logger("retry")

    def backoff(self, attempt: int) -> float:
        delay = self.backoff_base ** (attempt + 1)
        if self.backoff_jitter > 0:
            delay += random.uniform(0, self.backoff_jitter)
        return delay

    def execute(
        self,
        send: Callable[[], WireResponse],
        cancel: Optional[CancelToken] = None,
        trace_id: Optional[str] = None,
    ) -> RetryOutcome:
        attempt = 0
        state = RetryState.ATTEMPTING
        last_error: Optional[TransportError] = None

        while state is RetryState.ATTEMPTING:
            try:
                response = send()
            except CallCancelled as e:
                return self._cancelled(e, attempt + 1, trace_id)
            except TransportError as e:
                last_error = e
                if cancel is not None and cancel.cancelled:
                    cancelled = CallCancelled(cancel.reason or "deadline exceeded")
                    return self._cancelled(cancelled, attempt + 1, trace_id)
                if not e.retryable:
                    state = RetryState.NON_RETRYABLE
                    continue
                if attempt >= self.max_retries:
                    state = RetryState.EXHAUSTED_RETRIES
                    continue

                delay = self.backoff(attempt)
                self.logger.debug(
                    f"Transport failure, retrying in {delay:.1f}s",
                    trace_id=trace_id,
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    delay_seconds=delay,
                    error=str(e)
                )
                try:
                    self.sleeper.sleep(delay, cancel)
                except CallCancelled as cancelled:
                    return self._cancelled(cancelled, attempt + 1, trace_id)
                attempt += 1
            else:
                state = RetryState.SUCCEEDED
                if attempt > 0:
                    self.logger.debug(
                        f"Request succeeded after {attempt + 1} attempts",
                        trace_id=trace_id,
                        attempt=attempt + 1
                    )
                return RetryOutcome(state=state, attempts=attempt + 1, response=response)

        attempts = attempt + 1
        if state is RetryState.NON_RETRYABLE:
            summary = f"Request could not be sent: {last_error}"
        else:
            summary = f"Network failure after {attempts} attempts: {last_error}"
        self.logger.warning(
            f"Giving up after {attempts} attempts",
            trace_id=trace_id,
            attempt=attempts,
            max_retries=self.max_retries,
            kind=FailureKind.NETWORK_FAILURE.value,
            error=str(last_error)
        )
        return RetryOutcome(
            state=state,
            attempts=attempts,
            failure=CallFailure(
                kind=FailureKind.NETWORK_FAILURE,
                message=summary,
                cause=last_error.cause or last_error,
                attempts=attempts
            )
        )

    def _cancelled(self, error: CallCancelled, attempts: int, trace_id: Optional[str]) -> RetryOutcome:
        self.logger.debug(
            "Call cancelled",
            trace_id=trace_id,
            attempt=attempts,
            kind=FailureKind.CANCELLATION_FAILURE.value,
            error=str(error)
        )
        return RetryOutcome(
            state=RetryState.NON_RETRYABLE,
            attempts=attempts,
            failure=CallFailure(
                kind=FailureKind.CANCELLATION_FAILURE,
                message=str(error) or "cancelled",
                cause=error,
                attempts=attempts
            )
        )
