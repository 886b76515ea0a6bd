from __future__ import annotations

import asyncio
import threading

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from storyarcade.core.generation.errors import AllBackendsExhaustedError, GenerationCancelledError
from storyarcade.core.generation.orchestrator import GenerationOrchestrator
from storyarcade.core.generation.schemas import ImageRequest, NarrativeRequest
from storyarcade.core.logging.context import log_context

from .deps import get_orchestrator

router = APIRouter()

DISCONNECT_POLL_S = 0.25


async def watch_disconnect(request: Request, cancel: threading.Event, poll_s: float = DISCONNECT_POLL_S) -> None:
    """Set ``cancel`` once the client goes away; runs until cancelled."""
    while not cancel.is_set():
        if await request.is_disconnected():
            cancel.set()
            return
        await asyncio.sleep(poll_s)


async def _run_cancellable(request: Request, fn, payload):
    cancel = threading.Event()
    watcher = asyncio.create_task(watch_disconnect(request, cancel))
    try:
        return await run_in_threadpool(fn, payload, cancel)
    finally:
        watcher.cancel()


def _client_gone() -> JSONResponse:
    return JSONResponse(status_code=499, content={"error": "client_disconnected"})


@router.post("/story")
async def generate_story(
    payload: NarrativeRequest,
    request: Request,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    with log_context(track_id=payload.track_id, operation="narrative"):
        try:
            result = await _run_cancellable(request, orchestrator.generate_narrative, payload)
        except AllBackendsExhaustedError as exc:
            return JSONResponse(
                status_code=503,
                content={"error": "all_backends_exhausted", "backends": sorted(exc.causes)},
            )
        except GenerationCancelledError:
            return _client_gone()
    return result.model_dump()


@router.post("/poster")
async def generate_poster(
    payload: ImageRequest,
    request: Request,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    with log_context(track_id=payload.track_id, operation="image"):
        try:
            result = await _run_cancellable(request, orchestrator.generate_image, payload)
        except GenerationCancelledError:
            return _client_gone()
    if result is None:
        return {"status": "unavailable", "poster_url": None}
    return {"status": "ready", "poster_url": result.image_url}
