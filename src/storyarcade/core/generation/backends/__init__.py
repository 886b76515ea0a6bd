from __future__ import annotations

from ..contract import GenerationBackend
from ..settings import BackendName, GenerationSettings
from .anthropic import AnthropicBackend
from .base import HTTPGenerationBackend
from .gemini import GeminiBackend
from .perplexity import PerplexityBackend

BACKEND_TYPES: dict[BackendName, type[HTTPGenerationBackend]] = {
    BackendName.ANTHROPIC: AnthropicBackend,
    BackendName.GEMINI: GeminiBackend,
    BackendName.PERPLEXITY: PerplexityBackend,
}


def create_backend(name: BackendName, settings: GenerationSettings) -> GenerationBackend:
    backend_type = BACKEND_TYPES[name]
    return backend_type(settings.credentials(name), timeout_s=settings.timeout_s)


__all__ = ["AnthropicBackend", "GeminiBackend", "HTTPGenerationBackend", "PerplexityBackend", "BACKEND_TYPES", "create_backend"]
