#!/usr/bin/env python3
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Optional

import requests

from modelcall.logger import CallLogger, create_logger
from modelcall.llm.cancellation import CancelToken
from modelcall.llm.models import WireRequest, WireResponse
from modelcall.llm.errors import CallCancelled, TransportError
from .http_session import create_session


# Transient failures worth another attempt; any other RequestException
# (MissingSchema, InvalidURL, InvalidHeader, ...) fails the same way every time
RETRYABLE_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.ChunkedEncodingError,
    requests.exceptions.ContentDecodingError,
)


class HttpTransport:
    """
    Sends WireRequests over a shared requests.Session.

    Any received response counts as success here, whatever its status code;
    status handling belongs to ResponseParser. Only network-level failures
    are raised (as TransportError).

    With a CancelToken the blocking request runs on a transport-owned I/O
    thread and the caller waits on the token, so cancellation is observed
    during the network wait instead of after the request times out.

    A cancelled request keeps its I/O thread until it finishes or times out.
    io_workers bounds how many such requests can be in flight at once; once
    all are busy, new requests queue and their timeout starts only when a
    thread frees up.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        logger: Optional[CallLogger] = None,
        io_workers: int = 16,
        poll_interval: float = 0.05,
    ):
        self.session = session or create_session()
        self.logger = logger or create_logger("transport")
        self.poll_interval = poll_interval
        self._io_pool = ThreadPoolExecutor(
            max_workers=io_workers,
            thread_name_prefix="modelcall-io"
        )

    def send(self, request: WireRequest, cancel: Optional[CancelToken] = None) -> WireResponse:
        if cancel is not None and cancel.cancelled:
            raise CallCancelled(cancel.reason or "cancelled before send")

        timeout = request.timeout
        if cancel is not None:
            remaining = cancel.remaining()
            if remaining is not None:
                # The deadline may pass between the check above and here;
                # urllib3 rejects a zero timeout
                if remaining <= 0:
                    raise CallCancelled(cancel.reason or "deadline exceeded")
                timeout = min(timeout, remaining)

        self.logger.debug(
            "Model API request",
            trace_id=request.trace_id,
            timeout=timeout,
            body_bytes=len(request.body)
        )

        start = time.monotonic()
        if cancel is None:
            response = self._post(request, timeout)
        else:
            response = self._post_cancellable(request, timeout, cancel)
        elapsed = time.monotonic() - start

        self.logger.debug(
            "Model API response",
            trace_id=request.trace_id,
            status_code=response.status_code,
            duration_seconds=round(elapsed, 3)
        )

        return WireResponse(
            status_code=response.status_code,
            body=response.content,
            elapsed=elapsed,
            headers=dict(response.headers)
        )

    def _post(self, request: WireRequest, timeout: float) -> requests.Response:
        try:
            return self.session.post(
                request.url,
                data=request.body,
                headers=dict(request.headers),
                timeout=timeout
            )
        except RETRYABLE_ERRORS as e:
            raise TransportError(f"{type(e).__name__}: {e}", cause=e) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{type(e).__name__}: {e}", cause=e, retryable=False) from e

    def _post_cancellable(
        self,
        request: WireRequest,
        timeout: float,
        cancel: CancelToken
    ) -> requests.Response:
        future = self._io_pool.submit(self._post, request, timeout)
        while True:
            try:
                return future.result(timeout=self.poll_interval)
            except TransportError:
                # A deadline-capped timeout surfaces as a network error
                if cancel.cancelled:
                    raise CallCancelled(cancel.reason or "deadline exceeded")
                raise
            except FutureTimeoutError:
                if cancel.cancelled:
                    # The abandoned request finishes on its own, bounded by `timeout`
                    future.cancel()
                    self.logger.debug(
                        "Network wait cancelled",
                        trace_id=request.trace_id,
                        error=cancel.reason
                    )
                    raise CallCancelled(cancel.reason or "cancelled during network wait")

    def close(self):
        self._io_pool.shutdown(wait=False, cancel_futures=True)
        self.session.close()
