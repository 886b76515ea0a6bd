from __future__ import annotations

import pytest

from fakes import FakeClock, sample_narrative
from storyarcade.core.generation.schemas import ImageRequest, NarrativeRequest

_GENERATION_ENV = (
    "AI_PROVIDER_FALLBACK_ORDER",
    "AI_INTEGRATIONS_ANTHROPIC_API_KEY",
    "AI_INTEGRATIONS_ANTHROPIC_BASE_URL",
    "AI_INTEGRATIONS_GEMINI_API_KEY",
    "AI_INTEGRATIONS_GEMINI_BASE_URL",
    "PERPLEXITY_API_KEY",
    "PERPLEXITY_BASE_URL",
    "STORYARCADE_CONFIG_PATH",
    "STORYARCADE_BACKEND_TIMEOUT_S",
    "STORYARCADE_BREAKER_FAILURE_THRESHOLD",
    "STORYARCADE_BREAKER_RESET_SECONDS",
    "STORYARCADE_HEALTH_CACHE_TTL_S",
)


@pytest.fixture(autouse=True)
def isolate_generation_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _GENERATION_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("STORYARCADE_LOG_TO_FILE", "off")
    monkeypatch.setenv("STORYARCADE_HTTP_RETRIES", "0")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def narrative_request() -> NarrativeRequest:
    return NarrativeRequest(
        track_id="origin",
        track_title="Origin Story",
        answers={"hook": "my grandmother's kitchen", "challenge": "moving countries"},
    )


@pytest.fixture
def image_request() -> ImageRequest:
    story = sample_narrative()
    return ImageRequest(
        title=story.title,
        logline=story.logline,
        track_id="future",
        track_title="Future City",
        themes=story.themes,
        p1=story.p1,
    )
