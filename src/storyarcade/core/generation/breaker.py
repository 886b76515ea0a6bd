from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

DEFAULT_FAILURE_THRESHOLD = 5
DEFAULT_RESET_TIMEOUT_S = 30.0

logger = logging.getLogger("storyarcade.generation.breaker")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class CircuitBreaker:
    """Closed/open breaker for one backend.

    There is no half-open state. Once ``reset_timeout_s`` has passed since the
    last failure, ``is_open`` closes the breaker and the next call is the
    trial. The failure count survives that timed close, so a failed trial
    reopens the breaker at once; only ``record_success`` clears it.
    """

    backend: str
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    reset_timeout_s: float = DEFAULT_RESET_TIMEOUT_S
    state: str = "closed"
    failure_count: int = 0
    last_failure: datetime | None = None
    last_error: str | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.failure_threshold = max(1, int(self.failure_threshold))
        self.reset_timeout_s = max(0.0, float(self.reset_timeout_s))

    def is_open(self, now: datetime | None = None) -> bool:
        current = now or utc_now()
        with self._lock:
            if self.state != "open":
                return False
            if self.last_failure is not None and current - self.last_failure > timedelta(seconds=self.reset_timeout_s):
                self.state = "closed"
                logger.info(
                    "breaker_closed",
                    extra={"extra_fields": {"backend": self.backend, "reason": "reset timeout elapsed", "failure_count": self.failure_count}},
                )
                return False
            return True

    def record_failure(self, error_str: str, now: datetime | None = None) -> tuple[str, str] | None:
        current = now or utc_now()
        with self._lock:
            previous = self.state
            self.failure_count += 1
            self.last_failure = current
            self.last_error = error_str
            if self.failure_count >= self.failure_threshold:
                self.state = "open"
            failure_count = self.failure_count
            state = self.state

        if previous != state:
            logger.warning(
                "breaker_opened",
                extra={"extra_fields": {"backend": self.backend, "failure_count": failure_count, "reason": error_str}},
            )
            return previous, state
        return None

    def record_success(self) -> tuple[str, str] | None:
        with self._lock:
            previous = self.state
            self.failure_count = 0
            self.last_failure = None
            self.last_error = None
            self.state = "closed"
        if previous != "closed":
            return previous, "closed"
        return None

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            return {
                "state": self.state,
                "failure_count": self.failure_count,
                "last_failure_iso": _to_iso(self.last_failure),
                "last_error": self.last_error,
            }
