import pytest
from bursa_announcements.fetch.base import FailureKind, FetchOutcome, ProtocolError, TransportError
from bursa_announcements.fetch.retry import linear_backoff, retry

URL = "https://www.bursamalaysia.com/listing"

def scripted(*outcomes):
    """Operation that returns the given outcomes in order and records attempt numbers"""
    calls = []

    def operation(attempt):
        calls.append(attempt)
        return outcomes[attempt - 1]

    return operation, calls

def failed(detail, kind=TransportError):
    if kind is ProtocolError:
        return FetchOutcome.failure(URL, ProtocolError(detail, status_code=503))
    return FetchOutcome.failure(URL, kind(detail))

class TestLinearBackoff:
    def test_grows_with_attempt(self):
        backoff = linear_backoff(1.5)
        assert [backoff(n) for n in (1, 2, 3)] == [1.5, 3.0, 4.5]

class TestRetry:
    """Unit tests for the retry combinator"""

    def test_first_attempt_success_does_not_sleep(self, sleeps):
        operation, calls = scripted(FetchOutcome.success(URL, "<html/>"))
        outcome = retry(operation, 3, linear_backoff(1.0), sleep=sleeps.append)
        assert outcome.ok
        assert outcome.text == "<html/>"
        assert outcome.attempts == 1
        assert calls == [1]
        assert sleeps == []

    def test_success_on_last_attempt(self, sleeps):
        operation, calls = scripted(
            failed("connection reset"),
            failed("HTTP 503", ProtocolError),
            FetchOutcome.success(URL, "rows"),
        )
        outcome = retry(operation, 3, linear_backoff(2.0), sleep=sleeps.append)
        assert outcome.ok
        assert outcome.text == "rows"
        assert outcome.attempts == 3
        assert calls == [1, 2, 3]
        assert sleeps == [2.0, 4.0]

    def test_all_attempts_fail_returns_last_failure(self, sleeps):
        operation, calls = scripted(
            failed("HTTP 503", ProtocolError),
            failed("connection refused"),
            failed("timeout while fetching"),
        )
        failures = []
        outcome = retry(
            operation,
            3,
            linear_backoff(1.0),
            sleep=sleeps.append,
            on_failure=lambda attempt, o: failures.append((attempt, o.detail)),
        )
        assert not outcome.ok
        assert outcome.kind == FailureKind.TRANSPORT
        assert outcome.detail == "timeout while fetching"
        assert outcome.attempts == 3
        assert sleeps == [1.0, 2.0]
        assert failures == [(1, "HTTP 503"), (2, "connection refused"), (3, "timeout while fetching")]

    def test_single_attempt(self, sleeps):
        operation, _ = scripted(failed("HTTP 503", ProtocolError))
        outcome = retry(operation, 1, linear_backoff(1.0), sleep=sleeps.append)
        assert outcome.kind == FailureKind.PROTOCOL
        assert outcome.status_code == 503
        assert sleeps == []

    def test_zero_delay_skips_sleep(self, sleeps):
        operation, _ = scripted(failed("a"), failed("b"))
        retry(operation, 2, linear_backoff(0.0), sleep=sleeps.append)
        assert sleeps == []

    def test_rejects_zero_attempts(self):
        operation, _ = scripted()
        with pytest.raises(ValueError):
            retry(operation, 0, linear_backoff(1.0))
