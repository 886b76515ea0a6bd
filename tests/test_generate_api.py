from __future__ import annotations

import asyncio
import threading

from fastapi.testclient import TestClient

from fakes import FakeBackend
from storyarcade.apps.api import deps
from storyarcade.apps.api.main import app
from storyarcade.apps.api.routes_generate import watch_disconnect
from storyarcade.core.cache.ttl import TTLCache
from storyarcade.core.generation.errors import GenerationCancelledError
from storyarcade.core.generation.orchestrator import GenerationOrchestrator
from storyarcade.core.generation.schemas import ImageResult

STORY_BODY = {"track_id": "origin", "track_title": "Origin Story", "answers": {"hook": "a rooftop garden"}}
POSTER_BODY = {
    "title": "The Last Coffee Shop",
    "logline": "One more night.",
    "track_id": "legend",
    "track_title": "Neighborhood Legend",
    "themes": ["Community"],
    "p1": "Rain.",
}


def _client_with(orchestrator: GenerationOrchestrator) -> TestClient:
    app.dependency_overrides[deps.get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[deps.get_health_cache] = lambda: TTLCache(default_ttl_s=30)
    return TestClient(app)


def teardown_function() -> None:
    app.dependency_overrides.clear()


def test_story_endpoint_returns_narrative() -> None:
    backend = FakeBackend("x")
    with _client_with(GenerationOrchestrator([backend])) as client:
        response = client.post("/generate/story", json=STORY_BODY, headers={"X-Correlation-ID": "corr-1"})

    assert response.status_code == 200
    assert response.json()["title"] == "The Last Coffee Shop"
    assert response.headers["X-Correlation-ID"] == "corr-1"


def test_story_endpoint_exhausted_is_503() -> None:
    with _client_with(GenerationOrchestrator([FakeBackend("x", always_fail=True)])) as client:
        response = client.post("/generate/story", json=STORY_BODY)

    assert response.status_code == 503
    assert response.json() == {"error": "all_backends_exhausted", "backends": ["x"]}


def test_story_endpoint_tolerates_missing_answers() -> None:
    with _client_with(GenerationOrchestrator([FakeBackend("x")])) as client:
        response = client.post("/generate/story", json={"track_id": "future", "track_title": "Future City"})

    assert response.status_code == 200


def test_poster_endpoint_ready_and_unavailable() -> None:
    poster = ImageResult(image_url="https://images.local/p.png")
    with _client_with(GenerationOrchestrator([FakeBackend("x", image=poster)])) as client:
        ready = client.post("/generate/poster", json=POSTER_BODY)
    with _client_with(GenerationOrchestrator([FakeBackend("x", image=None)])) as client:
        unavailable = client.post("/generate/poster", json=POSTER_BODY)

    assert ready.json() == {"status": "ready", "poster_url": "https://images.local/p.png"}
    assert unavailable.json() == {"status": "unavailable", "poster_url": None}


def test_generation_health_reports_probes_and_breakers() -> None:
    orchestrator = GenerationOrchestrator([FakeBackend("x"), FakeBackend("y", healthy=False)])
    with _client_with(orchestrator) as client:
        response = client.get("/healthz/generation")

    payload = response.json()
    assert payload["ok"] is True
    assert payload["order"] == ["x", "y"]
    assert payload["backends"] == {"x": True, "y": False}
    assert payload["breakers"]["y"]["state"] == "closed"


class _DisconnectingRequest:
    def __init__(self, after_polls: int) -> None:
        self.after_polls = after_polls
        self.polls = 0

    async def is_disconnected(self) -> bool:
        self.polls += 1
        return self.polls > self.after_polls


def test_watch_disconnect_sets_cancel_event() -> None:
    cancel = threading.Event()
    request = _DisconnectingRequest(after_polls=2)

    asyncio.run(watch_disconnect(request, cancel, poll_s=0))

    assert cancel.is_set()
    assert request.polls == 3


def test_story_endpoint_passes_cancel_event_to_orchestrator() -> None:
    orchestrator = GenerationOrchestrator([FakeBackend("x")])
    seen = {}
    original = orchestrator.generate_narrative

    def capture(request, cancel=None):
        seen["cancel"] = cancel
        return original(request, cancel=cancel)

    orchestrator.generate_narrative = capture
    with _client_with(orchestrator) as client:
        response = client.post("/generate/story", json=STORY_BODY)

    assert response.status_code == 200
    assert isinstance(seen["cancel"], threading.Event)
    assert not seen["cancel"].is_set()


def test_cancelled_generation_returns_499() -> None:
    orchestrator = GenerationOrchestrator([FakeBackend("x")])

    def cancelled(request, cancel=None):
        raise GenerationCancelledError("image")

    orchestrator.generate_image = cancelled
    with _client_with(orchestrator) as client:
        response = client.post("/generate/poster", json=POSTER_BODY)

    assert response.status_code == 499
    assert response.json() == {"error": "client_disconnected"}
