from __future__ import annotations

from typing import Any

import httpx


class ApiError(RuntimeError):
    """Non-OK response from the TalentsPal API, carrying the server's `message`."""

    def __init__(
        self, message: str, *, status_code: int | None = None, payload: Any = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @classmethod
    def from_response(cls, resp: httpx.Response, *, default: str) -> ApiError:
        payload = response_json(resp)
        msg = ""
        if isinstance(payload, dict):
            msg = str(payload.get("message") or "")
        return cls(msg or default, status_code=resp.status_code, payload=payload)


class AuthError(ApiError):
    pass


def response_json(resp: httpx.Response) -> Any:
    """Decoded JSON body, or None when the body is empty or not JSON."""
    try:
        return resp.json()
    except ValueError:
        return None


def response_data(resp: httpx.Response) -> Any:
    """The `data` member of a `{success, data}` envelope, or None."""
    body = response_json(resp)
    if isinstance(body, dict):
        return body.get("data")
    return None
