from __future__ import annotations


class GenerationError(RuntimeError):
    """Base error for the generation layer."""


class BackendError(GenerationError):
    """A single backend failed: transport, protocol, or malformed output."""

    def __init__(self, backend: str, message: str) -> None:
        self.backend = backend
        super().__init__(f"{backend}: {message}")


class BackendConfigError(GenerationError):
    """Raised by an adapter constructor when required configuration is absent."""

    def __init__(self, backend: str, missing: str) -> None:
        self.backend = backend
        self.missing = missing
        super().__init__(f"backend_not_configured:{backend}: missing {missing}")


class AllBackendsExhaustedError(GenerationError):
    def __init__(self, operation: str, causes: dict[str, str] | None = None) -> None:
        self.operation = operation
        self.causes = dict(causes or {})
        detail = ", ".join(f"{name}={cause}" for name, cause in self.causes.items()) or "no backends configured"
        super().__init__(f"all_backends_exhausted:{operation} ({detail})")


class GenerationCancelledError(GenerationError):
    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"generation_cancelled:{operation}")
