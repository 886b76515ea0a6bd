from __future__ import annotations

import httpx
import pytest

from storyarcade.core.http.client import request_with_retry
from storyarcade.core.http.errors import StoryArcadeHTTPNetworkError, StoryArcadeHTTPStatusError


def _patch_client(monkeypatch, handler) -> None:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    monkeypatch.setattr("storyarcade.core.http.client.get_http_client", lambda: client)
    monkeypatch.setattr("storyarcade.core.http.client.time.sleep", lambda _: None)
    monkeypatch.setattr("storyarcade.core.http.client.random.random", lambda: 0.5)


def test_request_with_retry_retries_transient_http_status(monkeypatch) -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] < 3:
            return httpx.Response(503, request=request)
        return httpx.Response(200, request=request, json={"ok": True})

    _patch_client(monkeypatch, handler)

    response = request_with_retry("GET", "http://service.local/test", retries=2)

    assert response.status_code == 200
    assert calls["count"] == 3


def test_client_error_is_not_retried(monkeypatch) -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(400, request=request)

    _patch_client(monkeypatch, handler)

    with pytest.raises(StoryArcadeHTTPStatusError) as excinfo:
        request_with_retry("POST", "http://service.local/test", retries=3)
    assert excinfo.value.status_code == 400
    assert calls["count"] == 1


def test_network_error_after_retries_redacts_url(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    _patch_client(monkeypatch, handler)

    with pytest.raises(StoryArcadeHTTPNetworkError) as excinfo:
        request_with_retry("GET", "http://service.local/test?key=abc", retries=1, redact_url=True)
    assert "abc" not in str(excinfo.value)
