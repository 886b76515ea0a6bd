"""Capability contract every generation backend satisfies.

Backends raise :class:`BackendError` from the ``generate_*`` methods. The
orchestrator never calls those directly; it goes through ``attempt_*``, which
turn the call into an :class:`Attempt` so the fallback loop can branch on a
value instead of catching exceptions from each adapter.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from storyarcade.core.logging.redact import redact_string

from .schemas import ImageRequest, ImageResult, NarrativeRequest, NarrativeResult

T = TypeVar("T")

logger = logging.getLogger("storyarcade.generation.contract")


@dataclass(frozen=True)
class Attempt(Generic[T]):
    backend: str
    ok: bool
    value: T | None = None
    error: str | None = None

    @classmethod
    def success(cls, backend: str, value: T | None) -> "Attempt[T]":
        return cls(backend=backend, ok=True, value=value)

    @classmethod
    def failure(cls, backend: str, error: str) -> "Attempt[T]":
        return cls(backend=backend, ok=False, error=error)


class GenerationBackend(ABC):
    name: str = ""

    @abstractmethod
    def generate_narrative(self, request: NarrativeRequest) -> NarrativeResult: ...

    @abstractmethod
    def generate_image(self, request: ImageRequest) -> ImageResult | None: ...

    @abstractmethod
    def probe(self) -> None:
        """Raise if the backend is not reachable."""

    def is_healthy(self) -> bool:
        try:
            self.probe()
        except Exception as exc:
            logger.info(
                "backend_probe_failed",
                extra={"extra_fields": {"backend": self.name, "error": redact_string(str(exc))}},
            )
            return False
        return True

    def attempt_narrative(self, request: NarrativeRequest) -> Attempt[NarrativeResult]:
        return self._attempt(lambda: self.generate_narrative(request))

    def attempt_image(self, request: ImageRequest) -> Attempt[ImageResult]:
        return self._attempt(lambda: self.generate_image(request))

    def _attempt(self, fn: Callable[[], T | None]) -> Attempt[T]:
        try:
            value = fn()
        except Exception as exc:
            return Attempt.failure(self.name, f"{exc.__class__.__name__}: {redact_string(str(exc))}")
        return Attempt.success(self.name, value)
