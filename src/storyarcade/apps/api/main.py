from __future__ import annotations

import os
from pathlib import Path
from uuid import uuid4

import uvicorn
from fastapi import FastAPI

from storyarcade.core.logging import configure_logging
from storyarcade.core.logging.context import log_context

from .routes_generate import router as generate_router
from .routes_health import router as health_router


def _state_dir() -> Path:
    configured = os.getenv("STORYARCADE_STATE_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".storyarcade"


app = FastAPI(title="Story Arcade Generation API")
configure_logging(_state_dir())

app.include_router(generate_router, prefix="/generate", tags=["generate"])
app.include_router(health_router, prefix="/healthz", tags=["health"])


@app.middleware("http")
async def request_context_middleware(request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
    with log_context(correlation_id=correlation_id):
        response = await call_next(request)
    response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.get("/healthz")
def healthz() -> dict[str, bool]:
    return {"ok": True}


def run() -> None:
    uvicorn.run(
        "storyarcade.apps.api.main:app",
        host=os.getenv("STORYARCADE_HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5000")),
    )


if __name__ == "__main__":
    run()
