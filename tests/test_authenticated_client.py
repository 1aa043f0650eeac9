from __future__ import annotations

import asyncio

import httpx
import pytest

from talentspal.auth.store import ACCESS_TOKEN_KEY, CREDENTIAL_KEYS, REFRESH_TOKEN_KEY, USER_KEY
from talentspal.client import AuthenticatedClient
from talentspal.config import get_settings
from tests._helpers.fake_api import API_BASE, CountingStore, FakeApi

PROFILE = f"{API_BASE}/profile"


def _logged_in_store(token: str = "OLD") -> CountingStore:
    return CountingStore(
        {ACCESS_TOKEN_KEY: token, REFRESH_TOKEN_KEY: "RT-1", USER_KEY: '{"email":"a@b.c"}'}
    )


def test_non_401_passes_through_without_store_writes() -> None:
    async def _run() -> None:
        api = FakeApi(valid_token="GOOD")
        store = _logged_in_store("GOOD")
        async with api.http() as http:
            client = AuthenticatedClient(http, store)
            resp = await client.get(PROFILE)
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "path": "/api/profile"}
        assert store.writes == []
        assert store.clears == 0
        assert api.refresh_calls == []
        assert api.requests[0].headers["authorization"] == "Bearer GOOD"
        assert api.requests[0].headers["content-type"] == "application/json"

    asyncio.run(_run())


def test_no_token_sends_no_authorization_header() -> None:
    async def _run() -> None:
        api = FakeApi(unauthorized_message="No token provided")
        async with api.http() as http:
            resp = await AuthenticatedClient(http, CountingStore()).get(PROFILE)
        assert resp.status_code == 401
        assert "authorization" not in api.requests[0].headers
        assert api.refresh_calls == []

    asyncio.run(_run())


def test_expired_token_refreshes_and_retries_once() -> None:
    async def _run() -> None:
        api = FakeApi(valid_token="NEW")
        store = _logged_in_store("OLD")
        async with api.http() as http:
            client = AuthenticatedClient(http, store)
            resp = await client.post(PROFILE, json={"name": "x"})
        assert resp.status_code == 200
        assert store.get(ACCESS_TOKEN_KEY) == "NEW"
        assert (ACCESS_TOKEN_KEY, "NEW") in store.writes
        assert len(api.refresh_calls) == 1
        protected = api.calls_to("/api/profile")
        assert [r.headers["authorization"] for r in protected] == ["Bearer OLD", "Bearer NEW"]
        assert protected[1].method == "POST"
        assert protected[1].content == protected[0].content
        assert client.is_refreshing is False

    asyncio.run(_run())


def test_refresh_carries_refresh_cookie_and_no_body() -> None:
    async def _run() -> None:
        api = FakeApi()
        async with api.http() as http:
            await AuthenticatedClient(http, _logged_in_store()).get(PROFILE)
        (refresh,) = api.refresh_calls
        assert refresh.method == "POST"
        assert refresh.content == b""
        assert "refreshToken=RT-1" in refresh.headers.get("cookie", "")
        assert "authorization" not in refresh.headers

    asyncio.run(_run())


@pytest.mark.parametrize("message", ["Invalid token", "Token expired", "Not authorized"])
def test_non_expiry_401_is_returned_without_refresh(message: str) -> None:
    async def _run() -> None:
        api = FakeApi(unauthorized_message=message)
        store = _logged_in_store()
        async with api.http() as http:
            resp = await AuthenticatedClient(http, store).get(PROFILE)
        assert resp.status_code == 401
        assert resp.json()["message"] == message
        assert api.refresh_calls == []
        assert store.get(ACCESS_TOKEN_KEY) == "OLD"

    asyncio.run(_run())


def test_unparseable_401_body_does_not_refresh() -> None:
    async def _run() -> None:
        api = FakeApi(unauthorized_raw=b"<html>Invalid or expired token</html>")
        async with api.http() as http:
            resp = await AuthenticatedClient(http, _logged_in_store()).get(PROFILE)
        assert resp.status_code == 401
        assert api.refresh_calls == []

    asyncio.run(_run())


def test_refresh_rejected_logs_out_and_returns_original_401() -> None:
    async def _run() -> None:
        api = FakeApi(refresh_status=401, refresh_body={"message": "Invalid refresh token"})
        store = _logged_in_store()
        async with api.http() as http:
            client = AuthenticatedClient(http, store)
            resp = await client.get(PROFILE)
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid or expired token"
        for key in CREDENTIAL_KEYS:
            assert store.get(key) is None
        assert len(api.calls_to("/api/auth/logout")) == 1
        # original request only, no retry
        assert len(api.calls_to("/api/profile")) == 1
        assert client.is_refreshing is False

    asyncio.run(_run())


def test_refresh_malformed_body_is_a_refresh_failure() -> None:
    async def _run() -> None:
        api = FakeApi(refresh_body={"data": {}})
        store = _logged_in_store()
        async with api.http() as http:
            resp = await AuthenticatedClient(http, store).get(PROFILE)
        assert resp.status_code == 401
        assert store.get(ACCESS_TOKEN_KEY) is None
        assert len(api.calls_to("/api/profile")) == 1

    asyncio.run(_run())


def test_refresh_transport_error_clears_flag_and_logs_out() -> None:
    async def _run() -> None:
        api = FakeApi(refresh_error=httpx.ConnectError("refresh unreachable"))
        store = _logged_in_store()
        async with api.http() as http:
            client = AuthenticatedClient(http, store)
            resp = await client.get(PROFILE)
        assert resp.status_code == 401
        assert client.is_refreshing is False
        for key in CREDENTIAL_KEYS:
            assert store.get(key) is None

    asyncio.run(_run())


def test_logout_failure_falls_back_to_local_clear() -> None:
    async def _run() -> None:
        api = FakeApi(refresh_status=500, refresh_body={"message": "boom"})
        store = _logged_in_store()
        calls = {"logout": 0}

        async def broken_logout() -> None:
            calls["logout"] += 1
            raise RuntimeError("logout failed")

        async with api.http() as http:
            client = AuthenticatedClient(http, store, logout=broken_logout)
            resp = await client.get(PROFILE)
        assert resp.status_code == 401
        assert calls["logout"] == 1
        assert store.clears == 1
        for key in CREDENTIAL_KEYS:
            assert store.get(key) is None
        assert client.is_refreshing is False

    asyncio.run(_run())


def test_default_logout_network_error_still_clears_store() -> None:
    async def _run() -> None:
        api = FakeApi(refresh_status=403, refresh_body={"message": "nope"}, logout_error=True)
        store = _logged_in_store()
        async with api.http() as http:
            resp = await AuthenticatedClient(http, store).get(PROFILE)
        assert resp.status_code == 401
        for key in CREDENTIAL_KEYS:
            assert store.get(key) is None

    asyncio.run(_run())


def test_original_transport_error_propagates() -> None:
    async def _run() -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        store = _logged_in_store()
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = AuthenticatedClient(http, store)
            with pytest.raises(httpx.ConnectError):
                await client.get(PROFILE)
            assert client.is_refreshing is False
        assert store.get(ACCESS_TOKEN_KEY) == "OLD"

    asyncio.run(_run())


def test_retry_transport_error_logs_out_and_returns_original_401() -> None:
    async def _run() -> None:
        api = FakeApi(retry_error=True)
        store = _logged_in_store()
        async with api.http() as http:
            client = AuthenticatedClient(http, store)
            resp = await client.get(PROFILE)
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid or expired token"
        assert len(api.refresh_calls) == 1
        assert len(api.calls_to("/api/profile")) == 2
        assert len(api.calls_to("/api/auth/logout")) == 1
        for key in CREDENTIAL_KEYS:
            assert store.get(key) is None
        assert client.is_refreshing is False

    asyncio.run(_run())


def test_refresh_token_is_not_sent_to_other_hosts() -> None:
    async def _run() -> None:
        api = FakeApi()
        store = _logged_in_store()
        async with api.http() as http:
            client = AuthenticatedClient(http, store)
            assert (await client.get(PROFILE)).status_code == 200
            await client.get("http://third-party.example/collect")
            await client.get(f"{API_BASE}/dashboard")
        (refresh,) = api.refresh_calls
        assert "refreshToken=RT-1" in refresh.headers.get("cookie", "")
        others = [r for r in api.requests if r.url.path != "/api/auth/refresh"]
        assert [r.url.host for r in others if "cookie" in r.headers] == []

    asyncio.run(_run())


def test_concurrent_expired_requests_bail_while_refresh_in_flight() -> None:
    async def _run() -> None:
        api = FakeApi(gate_refresh=True)
        store = _logged_in_store()
        async with api.http() as http:
            client = AuthenticatedClient(http, store)
            first = asyncio.create_task(client.get(PROFILE))
            await api.refresh_started.wait()
            assert client.is_refreshing is True

            second = await client.get(f"{API_BASE}/dashboard")
            assert second.status_code == 401

            api.release_refresh.set()
            first_resp = await first
        assert first_resp.status_code == 200
        assert len(api.refresh_calls) == 1
        # the second caller was never retried
        assert len(api.calls_to("/api/dashboard")) == 1
        assert client.is_refreshing is False

    asyncio.run(_run())


def test_shared_mode_late_arrivals_reuse_inflight_refresh() -> None:
    async def _run() -> None:
        api = FakeApi(gate_refresh=True)
        store = _logged_in_store()
        async with api.http() as http:
            client = AuthenticatedClient(http, store, refresh_mode="shared")
            first = asyncio.create_task(client.get(PROFILE))
            await api.refresh_started.wait()
            second = asyncio.create_task(client.get(f"{API_BASE}/dashboard"))
            while len(api.calls_to("/api/dashboard")) < 1:
                await asyncio.sleep(0)
            for _ in range(20):
                await asyncio.sleep(0)
            api.release_refresh.set()
            r1, r2 = await asyncio.gather(first, second)
        assert (r1.status_code, r2.status_code) == (200, 200)
        assert len(api.refresh_calls) == 1
        dash = api.calls_to("/api/dashboard")
        assert [r.headers["authorization"] for r in dash] == ["Bearer OLD", "Bearer NEW"]

    asyncio.run(_run())


async def _wait_until_waiting(api: FakeApi, path: str) -> None:
    while len(api.calls_to(path)) < 1:
        await asyncio.sleep(0)
    for _ in range(20):
        await asyncio.sleep(0)


def test_shared_mode_failed_refresh_returns_each_callers_401() -> None:
    async def _run() -> None:
        api = FakeApi(gate_refresh=True, refresh_status=401, refresh_body={"message": "nope"})
        store = _logged_in_store()
        async with api.http() as http:
            client = AuthenticatedClient(http, store, refresh_mode="shared")
            first = asyncio.create_task(client.get(PROFILE))
            await api.refresh_started.wait()
            second = asyncio.create_task(client.get(f"{API_BASE}/dashboard"))
            await _wait_until_waiting(api, "/api/dashboard")
            api.release_refresh.set()
            r1, r2 = await asyncio.gather(first, second)
        assert (r1.status_code, r2.status_code) == (401, 401)
        assert len(api.refresh_calls) == 1
        assert len(api.calls_to("/api/profile")) == 1
        assert len(api.calls_to("/api/dashboard")) == 1
        for key in CREDENTIAL_KEYS:
            assert store.get(key) is None
        assert client.is_refreshing is False

    asyncio.run(_run())


def test_shared_mode_cancelled_refresh_owner_unblocks_waiters() -> None:
    async def _run() -> None:
        api = FakeApi(gate_refresh=True)
        store = _logged_in_store()
        async with api.http() as http:
            client = AuthenticatedClient(http, store, refresh_mode="shared")
            owner = asyncio.create_task(client.get(PROFILE))
            await api.refresh_started.wait()
            waiter = asyncio.create_task(client.get(f"{API_BASE}/dashboard"))
            await _wait_until_waiting(api, "/api/dashboard")
            owner.cancel()
            resp = await asyncio.wait_for(waiter, timeout=5)
            with pytest.raises(asyncio.CancelledError):
                await owner
        assert resp.status_code == 401
        assert len(api.calls_to("/api/dashboard")) == 1
        assert client.is_refreshing is False
        assert client._inflight is None
        # cancellation is not a refresh failure, so no logout
        assert store.get(ACCESS_TOKEN_KEY) == "OLD"

    asyncio.run(_run())


def test_multipart_body_has_no_json_content_type() -> None:
    async def _run() -> None:
        api = FakeApi(valid_token="GOOD")
        async with api.http() as http:
            client = AuthenticatedClient(http, _logged_in_store("GOOD"))
            resp = await client.post(
                f"{API_BASE}/auth/upload-profile-image",
                files={"image": ("me.png", b"\x89PNG....", "image/png")},
            )
        assert resp.status_code == 200
        ct = api.requests[0].headers["content-type"]
        assert ct.startswith("multipart/form-data; boundary=")
        assert "application/json" not in ct

    asyncio.run(_run())


def test_prebuilt_multipart_body_keeps_callers_boundary() -> None:
    async def _run() -> None:
        api = FakeApi(valid_token="GOOD")
        body = b'--xyz\r\nContent-Disposition: form-data; name="a"\r\n\r\n1\r\n--xyz--\r\n'
        async with api.http() as http:
            client = AuthenticatedClient(http, _logged_in_store("GOOD"))
            await client.post(
                PROFILE,
                content=body,
                headers={"Content-Type": "multipart/form-data; boundary=xyz"},
            )
        req = api.requests[0]
        assert req.headers.get_list("content-type") == ["multipart/form-data; boundary=xyz"]
        assert req.content == body

    asyncio.run(_run())


def test_caller_headers_override_defaults() -> None:
    async def _run() -> None:
        api = FakeApi(valid_token="GOOD")
        async with api.http() as http:
            client = AuthenticatedClient(http, _logged_in_store("GOOD"))
            await client.put(
                PROFILE,
                content=b"a,b",
                headers={"content-type": "text/csv", "X-Trace": "1"},
            )
        req = api.requests[0]
        assert req.headers.get_list("content-type") == ["text/csv"]
        assert req.headers["x-trace"] == "1"
        assert req.headers["authorization"] == "Bearer GOOD"

    asyncio.run(_run())


def test_refresh_trigger_is_configurable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REFRESH_TRIGGER_PHRASES", "jwt expired, Token expired")
    get_settings.cache_clear()

    async def _run() -> None:
        api = FakeApi(unauthorized_message="Token expired")
        store = _logged_in_store()
        async with api.http() as http:
            resp = await AuthenticatedClient(http, store).get(PROFILE)
        assert resp.status_code == 200
        assert len(api.refresh_calls) == 1

    asyncio.run(_run())


def test_custom_refresh_predicate() -> None:
    async def _run() -> None:
        api = FakeApi(unauthorized_message="whatever")
        async with api.http() as http:
            client = AuthenticatedClient(
                http, _logged_in_store(), should_refresh=lambda r: r.status_code == 401
            )
            resp = await client.get(PROFILE)
        assert resp.status_code == 200

    asyncio.run(_run())


def test_unknown_refresh_mode_rejected() -> None:
    async def _run() -> None:
        async with httpx.AsyncClient() as http:
            with pytest.raises(ValueError):
                AuthenticatedClient(http, CountingStore(), refresh_mode="queue")

    asyncio.run(_run())
