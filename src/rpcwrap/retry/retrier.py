"""
Retrier: runs a fallible operation until it succeeds or attempts run out.
"""

import functools
import logging
from typing import Callable, ParamSpec, TypeVar

from .backoff import BackoffFactory, default_backoff
from ..exceptions import RPCError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 1


def any_error(error: BaseException | None) -> bool:
    """Retry whenever the attempt raised."""
    return error is not None


def retryable_errors(error: BaseException | None) -> bool:
    """Retry only RPC errors flagged as retryable."""
    return isinstance(error, RPCError) and error.retryable


class Retrier:
    """
    Calls an operation up to `max_attempts` times.

    A Retrier is read-only after construction and can be shared between
    threads: every `do` call gets its own Backoff from the factory.
    """

    __slots__ = ("_max_attempts", "_is_retriable", "_backoff_factory")

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        is_retriable: Callable[[BaseException | None], bool] | None = None,
        backoff: BackoffFactory | None = None,
    ):
        """
        Initialize the retrier.

        Args:
            max_attempts: Total number of attempts, at least 1 (default: 1)
            is_retriable: Decides whether an attempt's error (None on success)
                warrants another attempt (default: any_error)
            backoff: Factory for the per-run Backoff
                (default: decorrelated exponential, 0.5s to 60s)
        """
        if (
            not isinstance(max_attempts, int)
            or isinstance(max_attempts, bool)
            or max_attempts < 1
        ):
            raise ValueError(f"max_attempts must be a positive integer, got {max_attempts!r}")

        self._max_attempts = max_attempts
        self._is_retriable = any_error if is_retriable is None else is_retriable
        self._backoff_factory = default_backoff() if backoff is None else backoff

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def is_retriable(self) -> Callable[[BaseException | None], bool]:
        return self._is_retriable

    @property
    def backoff_factory(self) -> BackoffFactory:
        return self._backoff_factory

    def do(self, operation: Callable[[], T]) -> T:
        """
        Call `operation` until it succeeds, fails permanently, or attempts run out.

        Args:
            operation: Zero-argument callable; failure is signalled by raising

        Returns:
            The operation's return value

        Raises:
            The last exception raised by the operation, unmodified
        """
        backoff = self._backoff_factory.new()
        result: T | None = None
        error: Exception | None = None

        for attempt in range(self._max_attempts):
            result, error = None, None
            try:
                result = operation()
            except Exception as e:
                error = e

            if not self._is_retriable(error):
                if error is not None:
                    logger.debug(
                        f"Attempt {attempt + 1}/{self._max_attempts} failed "
                        f"with non-retriable error: {error}"
                    )
                    raise error
                return result

            # Only back off if another attempt will follow
            if attempt + 1 < self._max_attempts:
                if error is None:
                    logger.warning(
                        f"Attempt {attempt + 1}/{self._max_attempts} succeeded but "
                        f"the result was marked retriable, backing off"
                    )
                else:
                    logger.warning(
                        f"Attempt {attempt + 1}/{self._max_attempts} failed: {error}, "
                        f"backing off"
                    )
                backoff.backoff(attempt)

        if error is not None:
            logger.error(f"All {self._max_attempts} attempts exhausted: {error}")
            raise error
        return result

    def wrap(self, func: Callable[P, T]) -> Callable[P, T]:
        """Return `func` with every call routed through `do`."""

        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return self.do(lambda: func(*args, **kwargs))

        return wrapper

    def __repr__(self) -> str:
        return (
            f"Retrier(max_attempts={self._max_attempts}, "
            f"is_retriable={self._is_retriable!r}, backoff={self._backoff_factory!r})"
        )


def with_retry(
    retrier: Retrier | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator for synchronous functions with retry logic.

    Args:
        retrier: Retrier to run calls through (default: Retrier())

    Returns:
        Decorator applying the retrier to each call
    """
    if retrier is None:
        retrier = Retrier()

    return retrier.wrap
