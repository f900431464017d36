"""Tests for the Retrier - behavior focused."""

import logging
import threading

import pytest

from rpcwrap.exceptions import InvalidRequestError, ServerError
from rpcwrap.retry import (
    DEFAULT_MAX_ATTEMPTS,
    DecorrelatedExponentialBackoff,
    FunctionalBackoff,
    NoopBackoff,
    Retrier,
    any_error,
    retryable_errors,
    with_retry,
)
from rpcwrap.retry import backoff as backoff_module


class Flaky:
    """Operation that raises `failures` times, then returns "ok"."""

    def __init__(self, failures: int, error: Exception | None = None):
        self.failures = failures
        self.error = error or RuntimeError("err")
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


@pytest.fixture
def backoff_calls():
    return []


@pytest.fixture
def recording_backoff(backoff_calls):
    return FunctionalBackoff(backoff_calls.append)


class TestRetrierDo:
    """Test the retry loop."""

    def test_succeeds_after_failures_within_budget(self, recording_backoff, backoff_calls):
        """K failures with N > K attempts: success after K + 1 calls."""
        op = Flaky(3)
        retrier = Retrier(max_attempts=4, backoff=recording_backoff)

        assert retrier.do(op) == "ok"
        assert op.calls == 4
        assert backoff_calls == [0, 1, 2]

    def test_exhausted_raises_last_error(self, recording_backoff, backoff_calls):
        """Always failing: N calls, N - 1 backoffs, last error raised."""
        op = Flaky(10)
        retrier = Retrier(max_attempts=3, backoff=recording_backoff)

        with pytest.raises(RuntimeError, match="err"):
            retrier.do(op)

        assert op.calls == 3
        assert backoff_calls == [0, 1]

    def test_error_is_surfaced_unmodified(self):
        error = ValueError("boom")
        retrier = Retrier(max_attempts=2, backoff=NoopBackoff())

        with pytest.raises(ValueError) as exc_info:
            retrier.do(Flaky(5, error))

        assert exc_info.value is error

    def test_predicate_false_returns_first_outcome(self, recording_backoff, backoff_calls):
        op = Flaky(3)
        retrier = Retrier(
            max_attempts=3,
            is_retriable=lambda error: False,
            backoff=recording_backoff,
        )

        with pytest.raises(RuntimeError):
            retrier.do(op)

        assert op.calls == 1
        assert backoff_calls == []

    def test_non_retriable_error_stops_early(self):
        op = Flaky(5, InvalidRequestError())
        retrier = Retrier(max_attempts=5, is_retriable=retryable_errors, backoff=NoopBackoff())

        with pytest.raises(InvalidRequestError):
            retrier.do(op)

        assert op.calls == 1

    def test_retryable_error_is_retried(self):
        op = Flaky(2, ServerError())
        retrier = Retrier(max_attempts=5, is_retriable=retryable_errors, backoff=NoopBackoff())

        assert retrier.do(op) == "ok"
        assert op.calls == 3

    def test_success_on_first_attempt_skips_backoff(self, recording_backoff, backoff_calls):
        op = Flaky(0)

        assert Retrier(max_attempts=3, backoff=recording_backoff).do(op) == "ok"
        assert op.calls == 1
        assert backoff_calls == []

    def test_predicate_retrying_success_returns_last_result(self, recording_backoff, backoff_calls):
        """A predicate may ask to retry successes; the last result is returned."""
        op = Flaky(0)
        retrier = Retrier(
            max_attempts=3, is_retriable=lambda error: True, backoff=recording_backoff
        )

        assert retrier.do(op) == "ok"
        assert op.calls == 3
        assert backoff_calls == [0, 1]

    def test_base_exceptions_are_not_captured(self):
        calls = []

        def interrupted():
            calls.append(1)
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            Retrier(max_attempts=3, backoff=NoopBackoff()).do(interrupted)

        assert calls == [1]

    def test_retried_success_is_not_logged_as_failure(self, caplog):
        retrier = Retrier(
            max_attempts=2, is_retriable=lambda error: True, backoff=NoopBackoff()
        )

        with caplog.at_level(logging.WARNING, logger="rpcwrap.retry.retrier"):
            assert retrier.do(Flaky(0)) == "ok"

        assert len(caplog.records) == 1
        assert "marked retriable" in caplog.records[0].getMessage()
        assert "None" not in caplog.records[0].getMessage()

    def test_logs_warning_on_retry_and_error_on_exhaustion(self, caplog):
        retrier = Retrier(max_attempts=2, backoff=NoopBackoff())

        with caplog.at_level(logging.WARNING, logger="rpcwrap.retry.retrier"):
            with pytest.raises(RuntimeError):
                retrier.do(Flaky(5))

        levels = [record.levelno for record in caplog.records]
        assert levels == [logging.WARNING, logging.ERROR]


class TestRetrierBackoffFactory:
    """Test that every run gets its own backoff."""

    def test_factory_called_once_per_run(self):
        created = []

        class CountingFactory:
            def new(self):
                created.append(1)
                return NoopBackoff()

        retrier = Retrier(max_attempts=3, backoff=CountingFactory())
        retrier.do(Flaky(2))
        retrier.do(Flaky(0))

        assert len(created) == 2

    def test_decorrelated_runs_start_from_min(self, monkeypatch):
        """Each run's first pause is min_wait, whatever earlier runs did."""
        sleeps = []
        monkeypatch.setattr(backoff_module, "_sleep", sleeps.append)
        retrier = Retrier(
            max_attempts=4, backoff=DecorrelatedExponentialBackoff(100, 30000)
        )

        with pytest.raises(RuntimeError):
            retrier.do(Flaky(10))
        with pytest.raises(RuntimeError):
            retrier.do(Flaky(10))

        assert len(sleeps) == 6
        assert sleeps[0] == 100
        assert sleeps[3] == 100

    def test_shared_across_threads(self):
        retrier = Retrier(max_attempts=3, backoff=NoopBackoff())
        results = []

        def worker():
            results.append(retrier.do(Flaky(2)))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == ["ok"] * 8


class TestNewRetrier:
    """Test Retrier construction."""

    def test_default_max_attempts_is_one(self):
        retrier = Retrier()

        assert retrier.max_attempts == DEFAULT_MAX_ATTEMPTS == 1

    def test_default_retries_any_error(self):
        assert Retrier().is_retriable is any_error
        assert any_error(RuntimeError()) is True
        assert any_error(None) is False

    def test_default_backoff_is_decorrelated(self):
        assert isinstance(Retrier().backoff_factory, DecorrelatedExponentialBackoff)

    def test_none_options_fall_back_to_defaults(self):
        retrier = Retrier(max_attempts=2, is_retriable=None, backoff=None)

        assert retrier.is_retriable is any_error
        assert isinstance(retrier.backoff_factory, DecorrelatedExponentialBackoff)

    @pytest.mark.parametrize("attempts", [0, -1, 1.5, True])
    def test_rejects_invalid_max_attempts(self, attempts):
        with pytest.raises(ValueError):
            Retrier(max_attempts=attempts)

    def test_falsy_backoff_factory_is_kept(self):
        """Only None selects the default; a falsy factory is still used."""

        class EmptyFactory:
            def __len__(self):
                return 0

            def new(self):
                return NoopBackoff()

        factory = EmptyFactory()
        retrier = Retrier(max_attempts=2, backoff=factory)

        assert retrier.backoff_factory is factory
        assert retrier.do(Flaky(1)) == "ok"

    def test_falsy_predicate_is_kept(self):
        class NeverRetry:
            def __bool__(self):
                return False

            def __call__(self, error):
                return False

        predicate = NeverRetry()
        op = Flaky(3)
        retrier = Retrier(max_attempts=3, is_retriable=predicate, backoff=NoopBackoff())

        assert retrier.is_retriable is predicate
        with pytest.raises(RuntimeError):
            retrier.do(op)
        assert op.calls == 1

    def test_is_read_only(self):
        retrier = Retrier()

        with pytest.raises(AttributeError):
            retrier.max_attempts = 5


class TestWithRetry:
    """Test the decorator form."""

    def test_decorated_function_is_retried(self):
        op = Flaky(2)

        @with_retry(Retrier(max_attempts=3, backoff=NoopBackoff()))
        def call(prefix):
            return prefix + op()

        assert call("result: ") == "result: ok"
        assert op.calls == 3

    def test_preserves_metadata(self):
        @with_retry()
        def documented():
            """Docstring."""
            return 1

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring."
        assert documented() == 1
