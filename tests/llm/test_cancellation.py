"""
Tests for CancelToken, PendingCall and the backoff sleepers.
"""

import threading
import time
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
import pytest

from modelcall.llm.cancellation import CancelToken
from modelcall.llm.clock import EventSleeper, RecordingSleeper
from modelcall.llm.errors import CallCancelled
from modelcall.llm.models import FailureKind, ModelResult
from modelcall.llm.pending import PendingCall


class TestCancelToken:
    """Test explicit cancellation and deadlines."""

    def test_starts_uncancelled(self):
        token = CancelToken()

        assert not token.cancelled
        assert token.reason is None
        assert token.remaining() is None

    def test_cancel_sets_reason(self):
        token = CancelToken()
        token.cancel("user aborted")

        assert token.cancelled
        assert token.reason == "user aborted"

    def test_first_reason_wins(self):
        token = CancelToken()
        token.cancel("first")
        token.cancel("second")

        assert token.reason == "first"

    def test_deadline_expiry(self):
        token = CancelToken.with_deadline(0.05)
        assert not token.cancelled

        time.sleep(0.1)

        assert token.cancelled
        assert token.reason == "deadline exceeded"
        assert token.remaining() == 0.0

    def test_remaining_counts_down(self):
        token = CancelToken.with_deadline(10.0)
        assert 9.0 < token.remaining() <= 10.0

    def test_wait_wakes_on_cancel(self):
        token = CancelToken()
        threading.Timer(0.05, token.cancel).start()

        start = time.monotonic()
        assert token.wait(5.0) is True
        assert time.monotonic() - start < 1.0

    def test_wait_capped_by_deadline(self):
        token = CancelToken.with_deadline(0.05)

        start = time.monotonic()
        assert token.wait(5.0) is True
        assert time.monotonic() - start < 1.0

    def test_wait_times_out_uncancelled(self):
        assert CancelToken().wait(0.01) is False


class TestSleepers:
    """Test backoff wait primitives."""

    def test_recording_sleeper_records(self):
        sleeper = RecordingSleeper()
        sleeper.sleep(2.0)
        sleeper.sleep(4.0, CancelToken())

        assert sleeper.calls == [2.0, 4.0]

    def test_recording_sleeper_raises_when_cancelled(self):
        token = CancelToken()
        token.cancel("stop")

        with pytest.raises(CallCancelled, match="stop"):
            RecordingSleeper().sleep(2.0, token)

    def test_event_sleeper_waits(self):
        start = time.monotonic()
        EventSleeper().sleep(0.05)
        assert time.monotonic() - start >= 0.04

    def test_event_sleeper_raises_on_cancel(self):
        token = CancelToken()
        threading.Timer(0.05, token.cancel, args=("stop",)).start()

        start = time.monotonic()
        with pytest.raises(CallCancelled, match="stop"):
            EventSleeper().sleep(8.0, token)
        assert time.monotonic() - start < 1.0


class TestPendingCall:
    """Test the async call handle."""

    def test_result_passthrough(self):
        future = Future()
        future.set_result(ModelResult(id="x", created=1, content="ok"))
        pending = PendingCall(future, CancelToken())

        assert pending.done()
        assert pending.result().content == "ok"

    def test_cancel_before_start(self):
        """A future cancelled before running yields a cancellation failure."""
        pending = PendingCall(Future(), CancelToken())
        pending.cancel("not needed")

        result = pending.result()

        assert result.kind is FailureKind.CANCELLATION_FAILURE
        assert result.message == "not needed"
        assert result.attempts == 0
        assert pending.token.cancelled

    def test_result_timeout_raises(self):
        pending = PendingCall(Future(), CancelToken())

        with pytest.raises(FutureTimeoutError):
            pending.result(timeout=0.01)

    def test_done_callback_receives_pending_call(self):
        future = Future()
        pending = PendingCall(future, CancelToken())
        seen = []
        pending.add_done_callback(seen.append)

        future.set_result(ModelResult(id="x", created=1, content="ok"))

        assert seen == [pending]
