class TransportError(Exception):
    """
    Network-level failure.

    Connection resets, timeouts and interrupted reads are retryable.
    Requests that cannot be sent at all (bad URL, invalid header) carry
    retryable=False and end the retry loop on the first attempt.
    """

    def __init__(self, message: str, cause: BaseException = None, retryable: bool = True):
        super().__init__(message)
        self.cause = cause
        self.retryable = retryable


class CallCancelled(Exception):
    """The caller's CancelToken fired. Never retried."""
