from __future__ import annotations

from functools import lru_cache

from storyarcade.core.cache.ttl import TTLCache
from storyarcade.core.generation.orchestrator import GenerationOrchestrator, build_orchestrator
from storyarcade.core.generation.settings import GenerationSettings, load_generation_settings


@lru_cache(maxsize=1)
def get_settings() -> GenerationSettings:
    return load_generation_settings()


@lru_cache(maxsize=1)
def get_orchestrator() -> GenerationOrchestrator:
    return build_orchestrator(get_settings())


@lru_cache(maxsize=1)
def get_health_cache() -> TTLCache:
    return TTLCache(default_ttl_s=get_settings().health_cache_ttl_s)
