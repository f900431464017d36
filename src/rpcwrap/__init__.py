"""
RPCWrap - Retrying RPC Calls.

A retry engine with pluggable backoff strategies, and RPC clients built on it.
"""

from .clients import (
    BaseRPCClient,
    HttpRPCClient,
    HttpTransportFactory,
    Transport,
    TransportFactory,
)
from .exceptions import (
    RPCError,
    TransportError,
    TimeoutError,
    RateLimitError,
    ServerError,
    AuthenticationError,
    MethodNotFoundError,
    InvalidRequestError,
)
from .retry import (
    BackoffStrategy,
    DecorrelatedExponentialBackoff,
    ExponentialBackoff,
    FixedBackoff,
    FunctionalBackoff,
    NoopBackoff,
    Retrier,
    RetryConfig,
    any_error,
    default_backoff,
    retryable_errors,
    with_retry,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Clients
    "BaseRPCClient",
    "HttpRPCClient",
    "HttpTransportFactory",
    "Transport",
    "TransportFactory",
    # Exceptions
    "RPCError",
    "TransportError",
    "TimeoutError",
    "RateLimitError",
    "ServerError",
    "AuthenticationError",
    "MethodNotFoundError",
    "InvalidRequestError",
    # Retry
    "BackoffStrategy",
    "DecorrelatedExponentialBackoff",
    "ExponentialBackoff",
    "FixedBackoff",
    "FunctionalBackoff",
    "NoopBackoff",
    "Retrier",
    "RetryConfig",
    "any_error",
    "default_backoff",
    "retryable_errors",
    "with_retry",
]
