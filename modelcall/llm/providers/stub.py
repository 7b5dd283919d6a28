import itertools
import threading
from typing import Iterable, Optional

from modelcall.llm.cancellation import CancelToken
from modelcall.llm.models import CallFailure, CallOutcome, FailureKind, ModelResult, Query
from .base import ModelProvider

STUB_CREATED = 1700000000


class StubModelProvider(ModelProvider):
    """
    Deterministic fake model for testing, CI and offline use.

    Without scripted outcomes every call succeeds with an echo of the query.
    With `outcomes`, calls return them in order and the last one repeats,
    which lets service-layer tests drive failure handling without a network.
    """

    def __init__(
        self,
        model: str = "stub",
        outcomes: Optional[Iterable[CallOutcome]] = None,
        max_workers: int = 4,
    ):
        super().__init__(max_workers=max_workers)
        self.model = model
        self._outcomes = list(outcomes or [])
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self.queries = []

    def call(self, query: Query, cancel: Optional[CancelToken] = None) -> CallOutcome:
        with self._lock:
            n = next(self._counter)
            self.queries.append(query)

        if cancel is not None and cancel.cancelled:
            return CallFailure(
                kind=FailureKind.CANCELLATION_FAILURE,
                message=cancel.reason or "cancelled",
                attempts=0
            )

        if self._outcomes:
            return self._outcomes[min(n, len(self._outcomes)) - 1]

        words = len(query.content.split())
        return ModelResult(
            id=f"stub-{n}",
            created=STUB_CREATED,
            content=f"Stub response to: {query.content}",
            model=query.model or self.model,
            usage={"prompt_tokens": words, "completion_tokens": 0, "total_tokens": words}
        )
