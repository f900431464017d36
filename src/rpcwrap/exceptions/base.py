"""
Exceptions raised by RPC clients.

Subclasses fix whether a failed call may be repeated as-is through
`retryable`; `rpcwrap.retry.retryable_errors` reads that flag.
"""


class RPCError(Exception):
    """
    A remote call failed.

    Attributes:
        message: Human readable cause
        retryable: Whether repeating the same call may succeed
        status_code: Transport-level status, when the server answered
        method: Remote method that was being invoked
    """

    default_message = "Remote call failed"
    default_retryable = False

    def __init__(
        self,
        message: str | None = None,
        *,
        retryable: bool | None = None,
        status_code: int | None = None,
        method: str | None = None,
    ):
        self.message = message or self.default_message
        self.retryable = self.default_retryable if retryable is None else retryable
        self.status_code = status_code
        self.method = method
        super().__init__(self.message)

    def __str__(self) -> str:
        text = f"{self.method}(): {self.message}" if self.method else self.message
        if self.status_code is not None:
            text = f"{text} [status {self.status_code}]"
        return text


# Transient failures: the same call may succeed later


class TransportError(RPCError):
    """The transport could not be opened or broke mid-call."""

    default_message = "Transport failed"
    default_retryable = True


class TimeoutError(RPCError):
    """No answer arrived within the client's timeout."""

    default_message = "Call timed out"
    default_retryable = True


class RateLimitError(RPCError):
    """
    The server throttled the caller.

    `retry_after` carries the server's Retry-After hint in seconds for
    callers that want it; the backoff strategies do not consult it.
    """

    default_message = "Rate limit exceeded"
    default_retryable = True

    def __init__(self, message: str | None = None, *, retry_after: float | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(RPCError):
    """The server failed while handling the call (5xx)."""

    default_message = "Server error"
    default_retryable = True


# Permanent failures: repeating the call cannot help


class AuthenticationError(RPCError):
    """The server rejected the caller's credentials."""

    default_message = "Authentication failed"


class MethodNotFoundError(RPCError):
    """The remote service has no such method."""

    default_message = "Method not found"


class InvalidRequestError(RPCError):
    """The server rejected the call's arguments."""

    default_message = "Invalid request"
