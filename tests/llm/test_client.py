"""
Tests for modelcall/llm/client.py

End-to-end through build -> transport -> retry -> parse, with a FakeSession
in place of the network.

Key behaviors to verify:
1. Transient failures are retried with 2, 4, 8 second backoff
2. HTTP errors are classified, never retried
3. One session is reused across calls
4. call_async runs the same pipeline and honors cancellation
"""

import json
import threading
import time
import pytest
import requests

from modelcall.llm.cancellation import CancelToken
from modelcall.llm.client import ModelCallClient
from modelcall.llm.models import CallFailure, FailureKind, ModelResult, Query
from modelcall.llm.pending import PendingCall
from modelcall.llm.request_builder import TRACE_HEADER
from modelcall.logger import CallLogger
from tests.fakes import FakeResponse, FakeSession, completion_body


def reset():
    return requests.exceptions.ConnectionError("connection reset by peer")


def make_client(config, script, sleeper=None, logger=None):
    session = FakeSession(script)
    client = ModelCallClient(config, session=session, sleeper=sleeper, logger=logger)
    return client, session


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        time.sleep(0.01)


class TestCall:
    """Test the synchronous pipeline."""

    def test_success(self, client_config, sleeper):
        client, session = make_client(
            client_config, [FakeResponse(200, completion_body("Hi there", "x"))], sleeper
        )

        result = client.call(Query("Hello"))

        assert isinstance(result, ModelResult)
        assert result.id == "x"
        assert result.content == "Hi there"
        assert len(session.calls) == 1
        assert json.loads(session.calls[0]["data"])["messages"][0]["content"] == "Hello"

    def test_retries_then_succeeds(self, client_config, sleeper):
        client, session = make_client(
            client_config,
            [reset(), reset(), reset(), FakeResponse(200, completion_body())],
            sleeper
        )

        result = client.call(Query("Hello"))

        assert isinstance(result, ModelResult)
        assert len(session.calls) == 4
        assert sleeper.calls == [2.0, 4.0, 8.0]

    def test_retry_reuses_trace_id(self, client_config, sleeper):
        """Retries resend the same WireRequest."""
        client, session = make_client(
            client_config, [reset(), FakeResponse(200, completion_body())], sleeper
        )

        client.call(Query("Hello"))

        first, second = session.calls
        assert first["headers"][TRACE_HEADER] == second["headers"][TRACE_HEADER]
        assert first["data"] == second["data"]

    def test_exhausted_retries(self, client_config, sleeper):
        client, session = make_client(client_config, [reset()], sleeper)

        result = client.call(Query("Hello"))

        assert isinstance(result, CallFailure)
        assert result.kind is FailureKind.NETWORK_FAILURE
        assert result.attempts == 4
        assert isinstance(result.cause, requests.exceptions.ConnectionError)
        assert len(session.calls) == 4
        assert sleeper.calls == [2.0, 4.0, 8.0]

    def test_zero_retries(self, client_config, sleeper):
        config = client_config.model_copy(update={"max_retries": 0})
        client, session = make_client(config, [reset()], sleeper)

        result = client.call(Query("Hello"))

        assert result.kind is FailureKind.NETWORK_FAILURE
        assert len(session.calls) == 1
        assert sleeper.calls == []

    @pytest.mark.parametrize("status", [400, 401, 429, 500])
    def test_http_error_not_retried(self, client_config, sleeper, status):
        client, session = make_client(
            client_config, [FakeResponse(status, b'{"error": {"message": "nope"}}')], sleeper
        )

        result = client.call(Query("Hello"))

        assert result.kind is FailureKind.HTTP_ERROR
        assert result.status_code == status
        assert "nope" in result.body_excerpt
        assert len(session.calls) == 1
        assert sleeper.calls == []

    def test_retry_then_http_error_keeps_attempts(self, client_config, sleeper):
        client, _ = make_client(client_config, [reset(), FakeResponse(503, b"busy")], sleeper)

        result = client.call(Query("Hello"))

        assert result.kind is FailureKind.HTTP_ERROR
        assert result.attempts == 2

    def test_malformed_and_empty(self, client_config, sleeper):
        client, _ = make_client(
            client_config,
            [FakeResponse(200, b"<html>gateway</html>"),
             FakeResponse(200, b'{"id":"x","created":1,"choices":[]}')],
            sleeper
        )

        assert client.call(Query("a")).kind is FailureKind.MALFORMED_RESPONSE
        assert client.call(Query("b")).kind is FailureKind.EMPTY_RESULT

    def test_session_reused_with_distinct_trace_ids(self, client_config, sleeper):
        client, session = make_client(
            client_config, [FakeResponse(200, completion_body())], sleeper
        )

        for _ in range(5):
            client.call(Query("Hello"))

        assert client.transport.session is session
        trace_ids = {call["headers"][TRACE_HEADER] for call in session.calls}
        assert len(trace_ids) == 5

    def test_cancelled_token_skips_network(self, client_config, sleeper):
        client, session = make_client(client_config, [FakeResponse(200, completion_body())], sleeper)
        token = CancelToken()
        token.cancel()

        result = client.call(Query("Hello"), cancel=token)

        assert result.kind is FailureKind.CANCELLATION_FAILURE
        assert session.calls == []

    def test_expired_deadline(self, client_config, sleeper):
        client, session = make_client(client_config, [FakeResponse(200, completion_body())], sleeper)

        result = client.call(Query("Hello"), cancel=CancelToken.with_deadline(0))

        assert result.kind is FailureKind.CANCELLATION_FAILURE
        assert result.message == "deadline exceeded"

    def test_deadline_ending_request_is_cancellation(self, client_config, sleeper):
        """The request times out at the deadline; that is never a network failure."""
        def time_out(call):
            time.sleep(call["timeout"] + 0.02)
            return requests.exceptions.ReadTimeout("read timed out")

        config = client_config.model_copy(update={"max_retries": 0})
        client, _ = make_client(config, [time_out], sleeper)

        try:
            kinds = [
                client.call(Query("hi"), cancel=CancelToken.with_deadline(0.05)).kind
                for _ in range(5)
            ]
        finally:
            client.close()

        assert kinds == [FailureKind.CANCELLATION_FAILURE] * 5
        assert sleeper.calls == []

    def test_endpoint_without_host_fails_once(self, client_config, sleeper):
        """A request requests refuses to send is not retried or backed off."""
        config = client_config.model_copy(update={"endpoint": "http://"})
        client = ModelCallClient(config, sleeper=sleeper)

        try:
            result = client.call(Query("Hello"))
        finally:
            client.close()

        assert result.kind is FailureKind.NETWORK_FAILURE
        assert result.attempts == 1
        assert isinstance(result.cause, requests.exceptions.InvalidURL)
        assert sleeper.calls == []

    def test_io_pool_sized_apart_from_async_pool(self, client_config):
        config = client_config.model_copy(update={"max_workers": 2, "io_workers": 7})
        client, _ = make_client(config, [FakeResponse()])

        try:
            assert client.transport._io_pool._max_workers == 7
            assert client.max_workers == 2
        finally:
            client.close()


class TestCallAsync:
    """Test the non-blocking variant."""

    def test_returns_pending_call(self, client_config, sleeper):
        client, _ = make_client(client_config, [FakeResponse(200, completion_body("async"))], sleeper)
        try:
            pending = client.call_async(Query("Hello"))

            assert isinstance(pending, PendingCall)
            result = pending.result(timeout=5)
            assert result.content == "async"
            assert pending.done()
        finally:
            client.close()

    def test_same_retry_rules(self, client_config, sleeper):
        client, session = make_client(client_config, [reset()], sleeper)
        try:
            result = client.call_async(Query("Hello")).result(timeout=5)
        finally:
            client.close()

        assert result.kind is FailureKind.NETWORK_FAILURE
        assert len(session.calls) == 4
        assert sleeper.calls == [2.0, 4.0, 8.0]

    def test_cancel_during_backoff(self, client_config):
        """Cancelling the pending call cuts the 2s backoff short."""
        client, session = make_client(client_config, [reset()])
        try:
            pending = client.call_async(Query("Hello"))
            wait_for(lambda: len(session.calls) == 1)

            start = time.monotonic()
            pending.cancel("user closed the tab")
            result = pending.result(timeout=2)
            elapsed = time.monotonic() - start
        finally:
            client.close()

        assert result.kind is FailureKind.CANCELLATION_FAILURE
        assert elapsed < 1.0
        assert len(session.calls) == 1

    def test_cancel_during_network_wait(self, client_config, sleeper):
        release = threading.Event()
        started = threading.Event()

        def hang(call):
            started.set()
            release.wait(5.0)
            return FakeResponse(200, completion_body())

        client, _ = make_client(client_config, [hang], sleeper)
        try:
            pending = client.call_async(Query("Hello"))
            assert started.wait(2.0)

            pending.cancel()
            result = pending.result(timeout=2)
        finally:
            release.set()
            client.close()

        assert result.kind is FailureKind.CANCELLATION_FAILURE
        assert sleeper.calls == []

    def test_concurrent_calls_are_independent(self, client_config, sleeper):
        client, session = make_client(client_config, [FakeResponse(200, completion_body())], sleeper)
        try:
            pending = [client.call_async(Query(f"q{i}")) for i in range(8)]
            results = [p.result(timeout=5) for p in pending]
        finally:
            client.close()

        assert all(isinstance(r, ModelResult) for r in results)
        assert len(session.calls) == 8


class TestLifecycle:
    """Test close and logging."""

    def test_close_closes_session(self, client_config, sleeper):
        client, session = make_client(client_config, [FakeResponse()], sleeper)
        client.close()
        assert session.closed

    def test_context_manager(self, client_config, sleeper):
        session = FakeSession([FakeResponse(200, completion_body())])
        with ModelCallClient(client_config, session=session, sleeper=sleeper) as client:
            assert client.call(Query("Hello")).success
        assert session.closed

    def test_jsonl_log_never_contains_api_key(self, client_config, sleeper, tmp_path):
        logger = CallLogger("client", log_dir=tmp_path, level="DEBUG")
        client, _ = make_client(
            client_config,
            [reset(), FakeResponse(200, completion_body())],
            sleeper,
            logger=logger
        )

        client.call(Query("Hello"))
        logger.close()

        lines = (tmp_path / "client.jsonl").read_text().splitlines()
        records = [json.loads(line) for line in lines]

        assert records[-1]["message"] == "Model call completed"
        assert records[-1]["attempt"] == 2
        assert all(r["component"] == "client" for r in records)
        assert {r.get("trace_id") for r in records if "trace_id" in r} == {records[-1]["trace_id"]}
        assert "sk-test-secret-key" not in "\n".join(lines)
