import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from modelcall.llm.cancellation import CancelToken
from modelcall.llm.models import CallOutcome, Query
from modelcall.llm.pending import PendingCall


class ModelProvider(ABC):
    """
    Abstract model call capability.

    Callers depend ONLY on call() / call_async(). Variants differ in how the
    call is carried out (HTTP endpoint, deterministic stub); the async mode is
    shared and always runs the variant's own synchronous call() on a
    background thread.
    """

    def __init__(self, max_workers: int = 4):
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    @abstractmethod
    def call(self, query: Query, cancel: Optional[CancelToken] = None) -> CallOutcome:
        """Run one call to completion. Returns ModelResult or CallFailure, never raises for call failures."""
        raise NotImplementedError

    def call_async(self, query: Query, cancel: Optional[CancelToken] = None) -> PendingCall:
        token = cancel or CancelToken()
        future = self._get_executor().submit(self.call, query, token)
        return PendingCall(future, token)

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix=f"modelcall-{type(self).__name__}"
                )
            return self._executor

    def close(self):
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
