"""
Retry configuration and strategy definitions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from .backoff import (
    MILLISECOND,
    SECOND,
    BackoffFactory,
    DecorrelatedExponentialBackoff,
    Duration,
    ExponentialBackoff,
    FixedBackoff,
    NoopBackoff,
    to_nanoseconds,
)
from .retrier import Retrier


class BackoffStrategy(str, Enum):
    """Available backoff strategies."""

    NOOP = "noop"  # no pause
    FIXED = "fixed"  # delay = min_wait
    EXPONENTIAL = "exponential"  # delay = min_wait * (2 ** attempt)
    DECORRELATED = "decorrelated"  # delay = random(min_wait, previous * 3)


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_attempts: Total number of attempts (default: 3)
        strategy: Backoff strategy to use (default: decorrelated)
        min_wait: First/minimum pause, nanoseconds or timedelta (default: 0.5s)
        max_wait: Maximum pause, nanoseconds or timedelta (default: 60s)
        jitter: Randomize exponential pauses (default: True)
        retry_on: Retriability predicate (default: any error)
    """

    max_attempts: int = 3
    strategy: BackoffStrategy = BackoffStrategy.DECORRELATED
    min_wait: Duration = 500 * MILLISECOND
    max_wait: Duration = 60 * SECOND
    jitter: bool = True
    retry_on: Callable[[BaseException | None], bool] | None = field(
        default=None, repr=False
    )

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        self.strategy = BackoffStrategy(self.strategy)
        self.min_wait = to_nanoseconds(self.min_wait)
        self.max_wait = to_nanoseconds(self.max_wait)

    def build_backoff(self) -> BackoffFactory:
        """Create the backoff factory described by this config."""
        if self.strategy == BackoffStrategy.NOOP:
            return NoopBackoff()
        if self.strategy == BackoffStrategy.FIXED:
            return FixedBackoff(self.min_wait)
        if self.strategy == BackoffStrategy.EXPONENTIAL:
            return ExponentialBackoff(self.min_wait, self.max_wait, jitter=self.jitter)
        return DecorrelatedExponentialBackoff(self.min_wait, self.max_wait)

    def build_retrier(self) -> Retrier:
        """Create a Retrier from this config."""
        return Retrier(
            max_attempts=self.max_attempts,
            is_retriable=self.retry_on,
            backoff=self.build_backoff(),
        )

    @classmethod
    def aggressive(cls) -> "RetryConfig":
        """Preset for aggressive retry (more attempts, longer delays)."""
        return cls(
            max_attempts=10,
            min_wait=1 * SECOND,
            max_wait=120 * SECOND,
        )

    @classmethod
    def conservative(cls) -> "RetryConfig":
        """Preset for conservative retry (fewer attempts, shorter delays)."""
        return cls(
            max_attempts=2,
            min_wait=250 * MILLISECOND,
            max_wait=10 * SECOND,
        )

    @classmethod
    def no_retry(cls) -> "RetryConfig":
        """Preset for no retry (single attempt only)."""
        return cls(max_attempts=1, strategy=BackoffStrategy.NOOP)
