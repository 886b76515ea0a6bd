from .contract import Attempt, GenerationBackend
from .errors import (
    AllBackendsExhaustedError,
    BackendConfigError,
    BackendError,
    GenerationCancelledError,
    GenerationError,
)
from .orchestrator import GenerationOrchestrator, build_orchestrator
from .schemas import ImageRequest, ImageResult, NarrativeRequest, NarrativeResult
from .settings import BackendName, GenerationSettings, load_generation_settings

__all__ = [
    "AllBackendsExhaustedError",
    "Attempt",
    "BackendConfigError",
    "BackendError",
    "BackendName",
    "GenerationBackend",
    "GenerationCancelledError",
    "GenerationError",
    "GenerationOrchestrator",
    "GenerationSettings",
    "ImageRequest",
    "ImageResult",
    "NarrativeRequest",
    "NarrativeResult",
    "build_orchestrator",
    "load_generation_settings",
]
