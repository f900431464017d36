"""
RPCWrap - Retry Logic.

A Retrier plus pluggable backoff strategies with overflow-safe arithmetic.
"""

from .backoff import (
    MAX_DURATION,
    NANOSECOND,
    MICROSECOND,
    MILLISECOND,
    SECOND,
    MINUTE,
    Backoff,
    BackoffFactory,
    DecorrelatedExponentialBackoff,
    DecorrelatedExponentialRun,
    ExponentialBackoff,
    FixedBackoff,
    FunctionalBackoff,
    NoopBackoff,
    default_backoff,
    to_nanoseconds,
)
from .retrier import (
    DEFAULT_MAX_ATTEMPTS,
    Retrier,
    any_error,
    retryable_errors,
    with_retry,
)
from .config import BackoffStrategy, RetryConfig

__all__ = [
    "MAX_DURATION",
    "NANOSECOND",
    "MICROSECOND",
    "MILLISECOND",
    "SECOND",
    "MINUTE",
    "Backoff",
    "BackoffFactory",
    "DecorrelatedExponentialBackoff",
    "DecorrelatedExponentialRun",
    "ExponentialBackoff",
    "FixedBackoff",
    "FunctionalBackoff",
    "NoopBackoff",
    "default_backoff",
    "to_nanoseconds",
    "DEFAULT_MAX_ATTEMPTS",
    "Retrier",
    "any_error",
    "retryable_errors",
    "with_retry",
    "BackoffStrategy",
    "RetryConfig",
]
