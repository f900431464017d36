"""
Backoff strategies and the factory protocol used by the Retrier.

Durations are integer nanoseconds bounded by the signed 64-bit range.
Every multiplication is checked against MAX_DURATION before it happens,
so a strategy never produces a negative or wrapped-around wait.
"""

import random
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Protocol, runtime_checkable

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND
MINUTE = 60 * SECOND

MAX_DURATION = 2**63 - 1

# Shifting past this many bits overflows a signed 64-bit duration
_MAX_SHIFT = 63

Duration = int | timedelta


def to_nanoseconds(value: Duration) -> int:
    """
    Normalize a duration to integer nanoseconds.

    Args:
        value: Nanoseconds as an int, or a timedelta

    Returns:
        Nanoseconds within [0, MAX_DURATION]

    Raises:
        ValueError: If the duration is negative or too large
    """
    if isinstance(value, timedelta):
        nanos = (
            (value.days * 86_400 + value.seconds) * SECOND
            + value.microseconds * MICROSECOND
        )
    elif isinstance(value, int) and not isinstance(value, bool):
        nanos = value
    else:
        raise ValueError(f"Expected int nanoseconds or timedelta, got {value!r}")

    if nanos < 0:
        raise ValueError(f"Duration must not be negative: {value!r}")
    if nanos > MAX_DURATION:
        raise ValueError(f"Duration exceeds the 64-bit nanosecond range: {value!r}")
    return nanos


def _sleep(nanoseconds: int) -> None:
    """Block the calling thread for the given number of nanoseconds."""
    if nanoseconds > 0:
        time.sleep(nanoseconds / SECOND)


@runtime_checkable
class Backoff(Protocol):
    """Pauses after a failed attempt.

    `attempt` is the zero-based index of the attempt that just failed.
    """

    def backoff(self, attempt: int) -> None: ...


@runtime_checkable
class BackoffFactory(Protocol):
    """Produces the Backoff used for a single Retrier run.

    Stateless strategies return themselves; stateful ones return a fresh
    instance so concurrent runs never share history.
    """

    def new(self) -> Backoff: ...


@dataclass(frozen=True)
class FunctionalBackoff:
    """Backoff that delegates to a callable receiving the attempt index."""

    func: Callable[[int], None]

    def new(self) -> "FunctionalBackoff":
        return self

    def backoff(self, attempt: int) -> None:
        self.func(attempt)


@dataclass(frozen=True)
class NoopBackoff:
    """Backoff that never waits. Useful for tests or to disable pausing."""

    def new(self) -> "NoopBackoff":
        return self

    def backoff(self, attempt: int) -> None:
        return None


@dataclass(frozen=True)
class FixedBackoff:
    """
    Sleeps for the same duration after every failure.

    Attributes:
        wait: Pause in nanoseconds (or a timedelta)
    """

    wait: Duration

    def __post_init__(self) -> None:
        object.__setattr__(self, "wait", to_nanoseconds(self.wait))

    def new(self) -> "FixedBackoff":
        return self

    def get_duration(self, attempt: int) -> int:
        return self.wait

    def backoff(self, attempt: int) -> None:
        _sleep(self.wait)


def _check_bounds(min_wait: int, max_wait: int) -> None:
    if min_wait > max_wait:
        raise ValueError(
            f"min_wait ({min_wait}ns) must not exceed max_wait ({max_wait}ns)"
        )


@dataclass(frozen=True)
class ExponentialBackoff:
    """
    Sleeps for an exponentially growing period, from min_wait up to max_wait.

    duration = min_wait * 2**attempt, saturating at max_wait. With jitter the
    duration is scaled into [duration/2, duration] to lessen thundering herd,
    but never drops below min_wait.

    Attributes:
        min_wait: First pause in nanoseconds (or a timedelta)
        max_wait: Upper bound in nanoseconds (or a timedelta)
        jitter: Randomize each pause (default: True)
    """

    min_wait: Duration
    max_wait: Duration
    jitter: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_wait", to_nanoseconds(self.min_wait))
        object.__setattr__(self, "max_wait", to_nanoseconds(self.max_wait))
        _check_bounds(self.min_wait, self.max_wait)

    def new(self) -> "ExponentialBackoff":
        return self

    def get_duration(self, attempt: int) -> int:
        """
        Calculate the pause for a given attempt.

        Args:
            attempt: Zero-based index of the attempt that failed

        Returns:
            Pause in nanoseconds
        """
        if attempt >= _MAX_SHIFT:
            return self.max_wait

        multiplier = 1 << attempt
        if self.min_wait > self.max_wait // multiplier:
            # Multiplying would pass max_wait (or the 64-bit range)
            duration = self.max_wait
        else:
            duration = self.min_wait * multiplier

        if self.jitter:
            # Final value is in the range [duration/2, duration]
            scaled = int(duration * (0.5 * (random.random() + 1.0)))
            # Truncation can drop an odd duration below its exact half
            duration = min(max(scaled, (duration + 1) // 2), duration)

        return max(duration, self.min_wait)

    def backoff(self, attempt: int) -> None:
        _sleep(self.get_duration(attempt))


@dataclass
class DecorrelatedExponentialRun:
    """
    Per-run state of a DecorrelatedExponentialBackoff.

    Each pause depends on the previous one rather than on the attempt index:
        sleep(n) = min(max_wait, random(min_wait, sleep(n-1) * 3))
    Not safe to share between concurrent runs.
    """

    min_wait: int
    max_wait: int
    last_wait: int = field(default=0)

    def get_duration(self) -> int:
        if self.last_wait == 0:
            # First backoff of the run
            self.last_wait = self.min_wait
            return self.min_wait

        if self.last_wait > MAX_DURATION // 3:
            upper = MAX_DURATION
        else:
            upper = self.last_wait * 3

        drawn = int(random.random() * (upper - self.min_wait) + self.min_wait)
        # Float rounding near the 64-bit limit can land just outside [min, upper]
        drawn = min(max(drawn, self.min_wait), upper)
        duration = min(self.max_wait, drawn)

        self.last_wait = duration
        return duration

    def backoff(self, attempt: int) -> None:
        _sleep(self.get_duration())


@dataclass(frozen=True)
class DecorrelatedExponentialBackoff:
    """
    Exponentially growing, heavily jittered backoff.

    The jitter is correlated with the previous pause instead of the attempt
    number, which spreads out competing clients better than plain
    exponential backoff. This is the recommended strategy when unsure. See
    https://www.awsarchitectureblog.com/2015/03/backoff.html

    Attributes:
        min_wait: First pause and lower bound, nanoseconds (or a timedelta)
        max_wait: Upper bound, nanoseconds (or a timedelta)
    """

    min_wait: Duration
    max_wait: Duration

    def __post_init__(self) -> None:
        object.__setattr__(self, "min_wait", to_nanoseconds(self.min_wait))
        object.__setattr__(self, "max_wait", to_nanoseconds(self.max_wait))
        _check_bounds(self.min_wait, self.max_wait)

    def new(self) -> DecorrelatedExponentialRun:
        """Return a fresh run with no prior wait recorded."""
        return DecorrelatedExponentialRun(min_wait=self.min_wait, max_wait=self.max_wait)


def default_backoff() -> DecorrelatedExponentialBackoff:
    """Backoff used when none is provided: decorrelated, 0.5s up to 60s."""
    return DecorrelatedExponentialBackoff(500 * MILLISECOND, 60 * SECOND)
