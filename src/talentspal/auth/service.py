"""
Auth service calls (signup / login / me / logout) and credential bookkeeping.

Login and signup persist the returned tokens into the credential store; logout
clears it. `logout_user` talks to the server and may fail, `simple_logout` is
the local-only fallback.
"""

from __future__ import annotations

from typing import Any

import httpx

from talentspal.api.endpoints import ApiEndpoints, get_endpoints, get_headers
from talentspal.auth.store import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    CredentialStore,
    set_user,
)
from talentspal.errors import ApiError, AuthError, response_json
from talentspal.utils.log import logger

REFRESH_COOKIE = "refreshToken"


def refresh_cookie_header(http: httpx.AsyncClient, store: CredentialStore) -> dict[str, str]:
    """
    Cookie header carrying the stored refresh token, for the refresh and logout calls.

    A server-set cookie already in the jar wins: the jar scopes it to the API host.
    The stored value never goes into the jar, so other hosts reached through the
    same client never see it.
    """
    rt = store.get(REFRESH_TOKEN_KEY)
    if not rt or http.cookies.get(REFRESH_COOKIE) is not None:
        return {}
    return {"Cookie": f"{REFRESH_COOKIE}={rt}"}


def _persist_session(store: CredentialStore, payload: Any) -> None:
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        return
    if data.get("accessToken"):
        store.set(ACCESS_TOKEN_KEY, str(data["accessToken"]))
    if data.get("refreshToken"):
        store.set(REFRESH_TOKEN_KEY, str(data["refreshToken"]))
    if isinstance(data.get("user"), dict):
        set_user(store, data["user"])


async def _post_credentials(
    http: httpx.AsyncClient,
    store: CredentialStore,
    url: str,
    form: dict[str, Any],
    *,
    default_error: str,
    event: str,
) -> dict[str, Any]:
    resp = await http.post(url, json=form, headers=get_headers())
    payload = response_json(resp)
    if not resp.is_success:
        logger.warning(f"{event}_failed", status=resp.status_code)
        raise ApiError.from_response(resp, default=default_error)
    _persist_session(store, payload)
    logger.info(f"{event}_ok")
    return payload if isinstance(payload, dict) else {}


async def signup_user(
    http: httpx.AsyncClient,
    store: CredentialStore,
    form: dict[str, Any],
    *,
    endpoints: ApiEndpoints | None = None,
) -> dict[str, Any]:
    ep = endpoints or get_endpoints()
    return await _post_credentials(
        http, store, ep.auth.signup, form, default_error="Signup failed", event="auth_signup"
    )


async def login_user(
    http: httpx.AsyncClient,
    store: CredentialStore,
    form: dict[str, Any],
    *,
    endpoints: ApiEndpoints | None = None,
) -> dict[str, Any]:
    ep = endpoints or get_endpoints()
    return await _post_credentials(
        http, store, ep.auth.login, form, default_error="Login failed", event="auth_login"
    )


async def get_current_user(
    http: httpx.AsyncClient,
    store: CredentialStore,
    *,
    endpoints: ApiEndpoints | None = None,
) -> dict[str, Any]:
    ep = endpoints or get_endpoints()
    token = store.get(ACCESS_TOKEN_KEY)
    if not token:
        raise AuthError("No access token found")
    resp = await http.get(ep.auth.me, headers=get_headers(token))
    payload = response_json(resp)
    if not resp.is_success:
        raise ApiError.from_response(resp, default="Failed to get user profile")
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        user = payload["data"].get("user", payload["data"])
        if isinstance(user, dict):
            set_user(store, user)
    return payload if isinstance(payload, dict) else {}


def simple_logout(store: CredentialStore) -> None:
    """Local-only logout: forget every stored credential."""
    store.clear()
    logger.info("auth_logout_local")


async def logout_user(
    http: httpx.AsyncClient,
    store: CredentialStore,
    *,
    endpoints: ApiEndpoints | None = None,
) -> None:
    """
    Tell the server to revoke the refresh cookie, then clear local credentials.

    The local clear always happens; a transport error is re-raised afterwards so
    callers can tell the server-side revoke did not go through.
    """
    ep = endpoints or get_endpoints()
    token = store.get(ACCESS_TOKEN_KEY)
    headers = {**get_headers(token), **refresh_cookie_header(http, store)}
    try:
        resp = await http.post(ep.auth.logout, headers=headers)
        if not resp.is_success:
            logger.warning("auth_logout_remote_rejected", status=resp.status_code)
    finally:
        store.clear()
        http.cookies.delete(REFRESH_COOKIE)
    logger.info("auth_logout_ok")


def is_authenticated(store: CredentialStore) -> bool:
    return bool(store.get(ACCESS_TOKEN_KEY))


def get_access_token(store: CredentialStore) -> str | None:
    return store.get(ACCESS_TOKEN_KEY)
