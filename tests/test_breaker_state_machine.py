from datetime import datetime, timedelta, timezone
import threading

from storyarcade.core.generation.breaker import CircuitBreaker


def _now() -> datetime:
    return datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_breaker_opens_on_fifth_consecutive_failure() -> None:
    now = _now()
    breaker = CircuitBreaker(backend="anthropic")

    for i in range(4):
        assert breaker.record_failure(f"e{i}", now=now) is None
    assert breaker.is_open(now=now) is False
    assert breaker.failure_count == 4

    transition = breaker.record_failure("e5", now=now)
    assert transition == ("closed", "open")
    assert breaker.is_open(now=now) is True


def test_breaker_closes_only_after_timeout_strictly_elapsed() -> None:
    now = _now()
    breaker = CircuitBreaker(backend="gemini", failure_threshold=5, reset_timeout_s=30)
    for _ in range(5):
        breaker.record_failure("down", now=now)

    assert breaker.is_open(now=now + timedelta(seconds=10)) is True
    assert breaker.is_open(now=now + timedelta(seconds=30)) is True
    assert breaker.is_open(now=now + timedelta(seconds=30, milliseconds=1)) is False
    assert breaker.state == "closed"


def test_failed_trial_after_timeout_reopens_immediately() -> None:
    now = _now()
    breaker = CircuitBreaker(backend="gemini")
    for _ in range(5):
        breaker.record_failure("down", now=now)

    trial_at = now + timedelta(seconds=31)
    assert breaker.is_open(now=trial_at) is False
    assert breaker.record_failure("still down", now=trial_at) == ("closed", "open")
    assert breaker.is_open(now=trial_at + timedelta(seconds=29)) is True
    assert breaker.is_open(now=trial_at + timedelta(seconds=31)) is False


def test_success_resets_regardless_of_prior_count() -> None:
    now = _now()
    breaker = CircuitBreaker(backend="perplexity")
    for _ in range(7):
        breaker.record_failure("boom", now=now)

    assert breaker.record_success() == ("open", "closed")
    assert breaker.failure_count == 0
    assert breaker.last_failure is None
    assert breaker.record_success() is None
    assert breaker.snapshot() == {
        "state": "closed",
        "failure_count": 0,
        "last_failure_iso": None,
        "last_error": None,
    }


def test_concurrent_failures_are_not_lost() -> None:
    breaker = CircuitBreaker(backend="anthropic", failure_threshold=50)
    barrier = threading.Barrier(8)

    def worker() -> None:
        barrier.wait()
        for _ in range(25):
            breaker.record_failure("boom")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert breaker.failure_count == 200
    assert breaker.state == "open"
