from __future__ import annotations

from fastapi import APIRouter, Depends

from storyarcade.core.cache.ttl import TTLCache
from storyarcade.core.generation.orchestrator import GenerationOrchestrator

from .deps import get_health_cache, get_orchestrator

router = APIRouter()


@router.get("/generation")
def generation_health(
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
    cache: TTLCache = Depends(get_health_cache),
) -> dict:
    backends = cache.get_or_set("generation_health", None, orchestrator.health_check)
    return {
        "ok": any(backends.values()) if isinstance(backends, dict) else False,
        "order": list(orchestrator.backend_names),
        "backends": backends,
        "breakers": orchestrator.breaker_snapshot(),
    }
