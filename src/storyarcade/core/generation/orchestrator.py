from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Sequence

from .backends import create_backend
from .breaker import DEFAULT_FAILURE_THRESHOLD, DEFAULT_RESET_TIMEOUT_S, CircuitBreaker, utc_now
from .contract import Attempt, GenerationBackend
from .errors import AllBackendsExhaustedError, BackendConfigError, GenerationCancelledError
from .schemas import ImageRequest, ImageResult, NarrativeRequest, NarrativeResult
from .settings import GenerationSettings

OPERATION_NARRATIVE = "narrative"
OPERATION_IMAGE = "image"
CIRCUIT_OPEN = "circuit_open"


class GenerationOrchestrator:
    """Tries backends in configured order behind one circuit breaker each.

    Per-backend failures become breaker bookkeeping and a log line; only
    narrative exhaustion (and cancellation) reach the caller. Image
    exhaustion returns ``None``.
    """

    def __init__(
        self,
        backends: Sequence[GenerationBackend],
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        reset_timeout_s: float = DEFAULT_RESET_TIMEOUT_S,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        names = [backend.name for backend in backends]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate backend names: {names}")
        self._backends: tuple[GenerationBackend, ...] = tuple(backends)
        self._breakers: dict[str, CircuitBreaker] = {
            backend.name: CircuitBreaker(
                backend=backend.name,
                failure_threshold=failure_threshold,
                reset_timeout_s=reset_timeout_s,
            )
            for backend in self._backends
        }
        self._clock = clock
        self.logger = logging.getLogger("storyarcade.generation")

    @property
    def backend_names(self) -> tuple[str, ...]:
        return tuple(backend.name for backend in self._backends)

    def breaker(self, name: str) -> CircuitBreaker:
        return self._breakers[name]

    def breaker_snapshot(self) -> dict[str, dict[str, object]]:
        return {name: breaker.snapshot() for name, breaker in self._breakers.items()}

    def generate_narrative(self, request: NarrativeRequest, cancel: threading.Event | None = None) -> NarrativeResult:
        causes: dict[str, str] = {}
        for backend in self._backends:
            attempt = self._try(backend, OPERATION_NARRATIVE, lambda: backend.attempt_narrative(request), causes, cancel)
            if attempt is not None and attempt.value is not None:
                return attempt.value
            if attempt is not None and attempt.ok:
                # A narrative backend returning nothing is malformed output.
                self._record_failure(backend.name, OPERATION_NARRATIVE, "empty narrative result", causes)

        self.logger.error(
            "backends_exhausted",
            extra={"extra_fields": {"operation": OPERATION_NARRATIVE, "causes": causes}},
        )
        raise AllBackendsExhaustedError(OPERATION_NARRATIVE, causes)

    def generate_image(self, request: ImageRequest, cancel: threading.Event | None = None) -> ImageResult | None:
        causes: dict[str, str] = {}
        for backend in self._backends:
            attempt = self._try(backend, OPERATION_IMAGE, lambda: backend.attempt_image(request), causes, cancel)
            if attempt is None:
                continue
            if attempt.value is not None:
                return attempt.value
            if attempt.ok:
                self.logger.info(
                    "backend_image_unsupported",
                    extra={"extra_fields": {"backend": backend.name, "operation": OPERATION_IMAGE}},
                )

        self.logger.warning(
            "backends_exhausted",
            extra={"extra_fields": {"operation": OPERATION_IMAGE, "causes": causes}},
        )
        return None

    def health_check(self) -> dict[str, bool]:
        results: dict[str, bool] = {}
        for backend in self._backends:
            try:
                results[backend.name] = bool(backend.is_healthy())
            except Exception:
                results[backend.name] = False
        return results

    def _try(
        self,
        backend: GenerationBackend,
        operation: str,
        call: Callable[[], Attempt],
        causes: dict[str, str],
        cancel: threading.Event | None,
    ) -> Attempt | None:
        """Run one attempt; ``None`` means the backend was not tried or failed."""
        if cancel is not None and cancel.is_set():
            self.logger.info("generation_cancelled", extra={"extra_fields": {"operation": operation}})
            raise GenerationCancelledError(operation)

        breaker = self._breakers[backend.name]
        if breaker.is_open(now=self._clock()):
            causes[backend.name] = CIRCUIT_OPEN
            self.logger.info(
                "backend_skipped_open",
                extra={"extra_fields": {"backend": backend.name, "operation": operation}},
            )
            return None

        start = time.perf_counter()
        attempt = call()
        duration_ms = int((time.perf_counter() - start) * 1000)

        if not attempt.ok:
            self._record_failure(backend.name, operation, attempt.error or "unknown error", causes, duration_ms)
            return None

        if attempt.value is not None:
            breaker.record_success()
            self.logger.info(
                "generation_succeeded",
                extra={"extra_fields": {"backend": backend.name, "operation": operation, "duration_ms": duration_ms}},
            )
        return attempt

    def _record_failure(
        self,
        name: str,
        operation: str,
        error: str,
        causes: dict[str, str],
        duration_ms: int | None = None,
    ) -> None:
        causes[name] = error
        self._breakers[name].record_failure(error, now=self._clock())
        self.logger.warning(
            "backend_failed",
            extra={
                "extra_fields": {
                    "backend": name,
                    "operation": operation,
                    "error": error,
                    "duration_ms": duration_ms,
                    "failure_count": self._breakers[name].failure_count,
                }
            },
        )


def build_orchestrator(settings: GenerationSettings, clock: Callable[[], datetime] = utc_now) -> GenerationOrchestrator:
    logger = logging.getLogger("storyarcade.generation")
    backends: list[GenerationBackend] = []
    for name in settings.order:
        try:
            backends.append(create_backend(name, settings))
        except BackendConfigError as exc:
            logger.warning(
                "backend_excluded",
                extra={"extra_fields": {"backend": name.value, "reason": f"missing {exc.missing}"}},
            )
    logger.info(
        "orchestrator_ready",
        extra={"extra_fields": {"order": [backend.name for backend in backends], "settings": settings.describe()}},
    )
    return GenerationOrchestrator(
        backends,
        failure_threshold=settings.failure_threshold,
        reset_timeout_s=settings.reset_timeout_s,
        clock=clock,
    )
