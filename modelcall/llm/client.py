#!/usr/bin/env python3
"""
Model call client for OpenAI-compatible chat completion APIs.

Orchestrates request building, transport, retry and parsing layers.

Simplified architecture:
- Single-turn calls (one user message per Query)
- No streaming
- Failures returned as CallFailure values, never raised
"""

import time
from typing import Optional

import requests

from modelcall.config.schemas import ClientConfig
from modelcall.logger import CallLogger, create_logger
from modelcall.llm.cancellation import CancelToken
from modelcall.llm.clock import Sleeper
from modelcall.llm.http import HttpTransport, ResponseParser, RetryPolicy, create_session
from modelcall.llm.models import CallFailure, CallOutcome, Query
from modelcall.llm.providers.base import ModelProvider
from modelcall.llm.request_builder import build_request


class ModelCallClient(ModelProvider):
    """
    Orchestrates model API calls with retry and response classification.

    Responsibilities:
    - Build a fresh WireRequest per call
    - Coordinate transport + retry + parsing layers
    - Report each call's outcome to the logger

    Components:
    - HttpTransport: HTTP requests over one shared connection pool
    - RetryPolicy: Retry state machine with exponential backoff
    - ResponseParser: Response extraction and failure classification

    Configuration is immutable for the lifetime of the client. The session
    is the only shared resource; calls are otherwise independent.
    """

    def __init__(
        self,
        config: ClientConfig,
        logger: Optional[CallLogger] = None,
        session: Optional[requests.Session] = None,
        sleeper: Optional[Sleeper] = None,
        transport: Optional[HttpTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Endpoint, credential, timeout and retry settings
            logger: Structured logger (default: propagates to the "modelcall" logger)
            session: requests.Session to reuse (default: pooled session from config)
            sleeper: Backoff wait primitive (default: EventSleeper)
            transport: Prebuilt transport (overrides session)
        """
        super().__init__(max_workers=config.max_workers)
        self.config = config
        self.logger = logger or create_logger("client")

        if transport is None:
            session = session or create_session(
                pool_connections=config.pool_connections,
                pool_maxsize=config.pool_maxsize
            )
            transport = HttpTransport(
                session=session,
                logger=self.logger,
                io_workers=config.io_workers
            )
        self.transport = transport
        self.retry = RetryPolicy(
            max_retries=config.max_retries,
            backoff_base=config.backoff_base,
            backoff_jitter=config.backoff_jitter,
            sleeper=sleeper,
            logger=self.logger
        )
        self.parser = ResponseParser(logger=self.logger)

    def call(self, query: Query, cancel: Optional[CancelToken] = None) -> CallOutcome:
        """
        Make a model API call with automatic retries.

        Args:
            query: User input plus optional model/temperature/max_tokens
            cancel: Optional token; cancellation or its deadline aborts the
                    call at the next network or backoff wait

        Returns:
            ModelResult on success, CallFailure otherwise
        """
        request = build_request(query, self.config)
        model = query.model or self.config.model
        start = time.monotonic()

        outcome = self.retry.execute(
            lambda: self.transport.send(request, cancel),
            cancel=cancel,
            trace_id=request.trace_id
        )

        if outcome.failure is not None:
            result = outcome.failure
        else:
            result = self.parser.parse(outcome.response, attempts=outcome.attempts)

        duration = round(time.monotonic() - start, 3)
        if isinstance(result, CallFailure):
            self.logger.warning(
                f"Model call failed: {result.kind.value}",
                trace_id=request.trace_id,
                model=model,
                kind=result.kind.value,
                status_code=result.status_code,
                attempt=result.attempts,
                duration_seconds=duration,
                error=result.message
            )
        else:
            self.logger.info(
                "Model call completed",
                trace_id=request.trace_id,
                model=model,
                attempt=outcome.attempts,
                duration_seconds=duration
            )

        return result

    def close(self):
        super().close()
        self.transport.close()
