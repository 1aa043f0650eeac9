from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from talentspal.api.endpoints import ApiEndpoints, get_endpoints
from talentspal.auth.service import logout_user, refresh_cookie_header, simple_logout
from talentspal.auth.store import ACCESS_TOKEN_KEY, CredentialStore
from talentspal.config import get_settings
from talentspal.errors import response_json
from talentspal.utils.log import logger

RefreshPredicate = Callable[[httpx.Response], bool]
LogoutRoutine = Callable[[], Awaitable[None]]


def expiry_predicate(phrases: list[str] | tuple[str, ...]) -> RefreshPredicate:
    """
    Build the "is this 401 an expired access token?" check.

    A 401 qualifies when its JSON `message` contains one of `phrases`. Anything
    else (other wording, non-JSON body) does not, so a bad token is never retried.
    """
    wanted = tuple(p for p in phrases if p)
    if not wanted:
        # valid, but no 401 will ever trigger a refresh
        logger.warning("refresh_triggers_empty")

    def _check(resp: httpx.Response) -> bool:
        payload = response_json(resp)
        if not isinstance(payload, dict):
            return False
        message = str(payload.get("message") or "")
        return any(p in message for p in wanted)

    return _check


def _is_multipart(options: Mapping[str, Any]) -> bool:
    return bool(options.get("files"))


def build_headers(
    token: str | None,
    caller: Mapping[str, str] | None = None,
    *,
    multipart: bool = False,
) -> dict[str, str]:
    """
    Defaults, then bearer token, then caller headers (caller wins, case-insensitively).

    Multipart requests never carry a Content-Type: the transport adds one with
    the boundary.
    """
    merged: dict[str, str] = {"Content-Type": "application/json"}
    if token:
        merged["Authorization"] = f"Bearer {token}"
    for k, v in (caller or {}).items():
        for existing in [e for e in merged if e.lower() == str(k).lower()]:
            del merged[existing]
        merged[str(k)] = v
    if multipart:
        for existing in [e for e in merged if e.lower() == "content-type"]:
            del merged[existing]
    return merged


def _with_token(headers: dict[str, str], token: str) -> dict[str, str]:
    out = {k: v for k, v in headers.items() if k.lower() != "authorization"}
    out["Authorization"] = f"Bearer {token}"
    return out


def _extract_access_token(resp: httpx.Response) -> str | None:
    payload = response_json(resp)
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    token = data.get("accessToken")
    return str(token) if isinstance(token, str) and token else None


def build_http_client(**kwargs: Any) -> httpx.AsyncClient:
    kwargs.setdefault("timeout", float(get_settings().request_timeout_sec))
    return httpx.AsyncClient(**kwargs)


class AuthenticatedClient:
    """
    Bearer-auth wrapper around an `httpx.AsyncClient`.

    On a 401 whose message says the access token expired, one refresh call is
    made (refresh token travels as a cookie), the new token is stored and the
    original request is replayed once. `is_refreshing` guards the refresh: while
    it is set, other callers hitting an expired-token 401 get their 401 back
    (REFRESH_MODE=bail) or wait for the in-flight refresh (REFRESH_MODE=shared).
    A failed refresh logs the user out and the original 401 is returned.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        store: CredentialStore,
        *,
        endpoints: ApiEndpoints | None = None,
        refresh_mode: str | None = None,
        should_refresh: RefreshPredicate | None = None,
        logout: LogoutRoutine | None = None,
        owns_http: bool = False,
    ) -> None:
        s = get_settings()
        self.http = http
        self.store = store
        self.endpoints = endpoints or get_endpoints()
        self.refresh_mode = str(refresh_mode or s.refresh_mode).strip().lower()
        if self.refresh_mode not in {"bail", "shared"}:
            raise ValueError(f"unknown refresh_mode: {self.refresh_mode!r}")
        self.should_refresh = should_refresh or expiry_predicate(s.refresh_trigger_list())
        self._logout = logout or self._default_logout
        self._owns_http = owns_http
        self.is_refreshing = False
        self._inflight: asyncio.Future[str | None] | None = None

    @classmethod
    def from_settings(cls, store: CredentialStore, **kwargs: Any) -> AuthenticatedClient:
        return cls(build_http_client(), store, owns_http=True, **kwargs)

    async def __aenter__(self) -> AuthenticatedClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def send(self, url: str, *, method: str = "GET", **options: Any) -> httpx.Response:
        caller_headers = options.pop("headers", None)
        headers = build_headers(
            self.store.get(ACCESS_TOKEN_KEY),
            caller_headers,
            multipart=_is_multipart(options),
        )
        resp = await self.http.request(method, url, headers=headers, **options)
        if resp.status_code != 401:
            return resp

        if not self.should_refresh(resp):
            logger.info("auth_unauthorized_no_refresh", method=method, url=url)
            return resp

        if self.is_refreshing:
            inflight = self._inflight
            if self.refresh_mode != "shared" or inflight is None:
                logger.info("auth_refresh_inflight_skip", method=method, url=url)
                return resp
            shared_token = await asyncio.shield(inflight)
            if not shared_token:
                return resp
            return await self._retry(method, url, headers, shared_token, options, resp)

        # No await between the check above and taking the flag.
        self.is_refreshing = True
        inflight = asyncio.get_running_loop().create_future()
        self._inflight = inflight
        try:
            token = await self._refresh()
            inflight.set_result(token)
            if token:
                resp = await self._retry(method, url, headers, token, options, resp)
        finally:
            if not inflight.done():
                inflight.set_result(None)
            self._inflight = None
            self.is_refreshing = False
        return resp

    async def request(self, method: str, url: str, **options: Any) -> httpx.Response:
        return await self.send(url, method=method, **options)

    async def get(self, url: str, **options: Any) -> httpx.Response:
        return await self.send(url, method="GET", **options)

    async def post(self, url: str, **options: Any) -> httpx.Response:
        return await self.send(url, method="POST", **options)

    async def put(self, url: str, **options: Any) -> httpx.Response:
        return await self.send(url, method="PUT", **options)

    async def delete(self, url: str, **options: Any) -> httpx.Response:
        return await self.send(url, method="DELETE", **options)

    async def _retry(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        token: str,
        options: dict[str, Any],
        original: httpx.Response,
    ) -> httpx.Response:
        """Replay once with `token`; a failed replay logs out and yields `original`."""
        try:
            return await self.http.request(
                method, url, headers=_with_token(headers, token), **options
            )
        except Exception as ex:
            logger.warning("auth_retry_failed", method=method, url=url, error=str(ex))
            await self._logout_with_fallback()
            return original

    async def _refresh(self) -> str | None:
        """
        Exchange the refresh cookie for a new access token.

        Returns the new token, or None after logging the user out. Never raises
        for refresh failures.
        """
        logger.info("auth_refresh_start")
        headers = {"Content-Type": "application/json"}
        headers.update(refresh_cookie_header(self.http, self.store))
        try:
            r = await self.http.post(self.endpoints.auth.refresh, headers=headers)
            if r.is_success:
                token = _extract_access_token(r)
                if token:
                    self.store.set(ACCESS_TOKEN_KEY, token)
                    logger.info("auth_refresh_ok")
                    return token
                logger.warning("auth_refresh_failed", reason="malformed_body", status=r.status_code)
            else:
                logger.warning("auth_refresh_failed", reason="rejected", status=r.status_code)
        except Exception as ex:
            logger.warning("auth_refresh_failed", reason="error", error=str(ex))
        await self._logout_with_fallback()
        return None

    async def _logout_with_fallback(self) -> None:
        try:
            await self._logout()
        except Exception as ex:
            logger.warning("auth_logout_fallback", error=str(ex))
            simple_logout(self.store)

    async def _default_logout(self) -> None:
        await logout_user(self.http, self.store, endpoints=self.endpoints)
