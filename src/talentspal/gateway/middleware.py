from __future__ import annotations

import re
import time
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.gzip import GZipMiddleware
from starlette.types import Receive, Scope, Send

from talentspal.config import get_settings
from talentspal.utils.log import logger, set_request_id

_STATIC_RE = re.compile(r"\.(jpg|jpeg|png|gif|svg|css|js|ico|woff|woff2|ttf|eot)$", re.IGNORECASE)
NO_STORE = "no-store, no-cache, must-revalidate, proxy-revalidate"


def _new_request_id() -> str:
    return uuid.uuid4().hex


async def request_context_middleware(
    request: Request, call_next: Callable[[Request], Any]
) -> Response:
    """
    Request-scoped context:
    - Inject X-Request-ID if absent
    - Put request_id into a contextvar so all logs get the correlation field
    """
    rid = request.headers.get("x-request-id") or _new_request_id()
    set_request_id(rid)
    request.state.request_id = rid
    try:
        resp = await call_next(request)
        resp.headers.setdefault("x-request-id", rid)
        return resp
    finally:
        set_request_id(None)


async def cache_control_middleware(
    request: Request, call_next: Callable[[Request], Any]
) -> Response:
    resp = await call_next(request)
    path = request.url.path
    if _STATIC_RE.search(path):
        max_age = int(get_settings().static_max_age_sec)
        resp.headers["cache-control"] = f"public, max-age={max_age}, immutable"
    elif path.startswith("/api/"):
        resp.headers["cache-control"] = NO_STORE
        resp.headers["pragma"] = "no-cache"
        resp.headers["expires"] = "0"
    return resp


async def log_requests(request: Request, call_next: Callable[[Request], Any]) -> Response:
    t0 = time.perf_counter()
    status_code = 0
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        logger.info(
            "http_done",
            ip=request.client.host if request.client else "unknown",
            method=request.method,
            path=request.url.path,
            status=status_code,
            duration_ms=(time.perf_counter() - t0) * 1000.0,
        )


class SelectiveGZipMiddleware(GZipMiddleware):
    """GZip, except for requests that opt out with an `X-No-Compression` header."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            for k, _v in scope.get("headers") or []:
                if k.lower() == b"x-no-compression":
                    await self.app(scope, receive, send)
                    return
        await super().__call__(scope, receive, send)
