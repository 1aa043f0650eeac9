from __future__ import annotations

import time
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from talentspal.config import get_settings
from talentspal.gateway.middleware import (
    SelectiveGZipMiddleware,
    cache_control_middleware,
    log_requests,
    request_context_middleware,
)


def _health_payload(request: Request) -> dict[str, Any]:
    started = float(getattr(request.app.state, "started_at", time.monotonic()))
    return {
        "uptime": time.monotonic() - started,
        "message": "OK",
        "timestamp": int(time.time() * 1000),
        "environment": str(get_settings().env),
    }


def create_app() -> FastAPI:
    s = get_settings()
    app = FastAPI(title="TalentsPal gateway")
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=s.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    app.add_middleware(
        SelectiveGZipMiddleware,
        minimum_size=int(s.gzip_min_bytes),
        compresslevel=int(s.gzip_level),
    )

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        return JSONResponse(_health_payload(request), status_code=200)

    app.middleware("http")(cache_control_middleware)
    app.middleware("http")(log_requests)
    # Must be outermost so request_id is present for all logs (including log_requests).
    app.middleware("http")(request_context_middleware)
    return app
