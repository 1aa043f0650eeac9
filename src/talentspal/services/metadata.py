"""
Public lookup lists used by signup and profile forms.

A lookup that fails (transport error or non-OK status) is logged and yields an
empty list, so a form can still render.
"""

from __future__ import annotations

from typing import Any

import httpx

from talentspal.api.endpoints import ApiEndpoints, get_endpoints, get_headers
from talentspal.errors import response_data
from talentspal.utils.log import logger


async def _fetch_list(http: httpx.AsyncClient, url: str, kind: str) -> list[Any]:
    try:
        resp = await http.get(url, headers=get_headers())
    except httpx.HTTPError as ex:
        logger.warning("metadata_fetch_failed", kind=kind, error=str(ex))
        return []
    if not resp.is_success:
        logger.warning("metadata_fetch_failed", kind=kind, status=resp.status_code)
        return []
    data = response_data(resp)
    return list(data) if isinstance(data, list) else []


async def fetch_universities(
    http: httpx.AsyncClient, *, endpoints: ApiEndpoints | None = None
) -> list[Any]:
    ep = endpoints or get_endpoints()
    return await _fetch_list(http, ep.metadata.universities, "universities")


async def fetch_majors(
    http: httpx.AsyncClient, *, endpoints: ApiEndpoints | None = None
) -> list[Any]:
    ep = endpoints or get_endpoints()
    return await _fetch_list(http, ep.metadata.majors, "majors")


async def fetch_industries(
    http: httpx.AsyncClient, *, endpoints: ApiEndpoints | None = None
) -> list[Any]:
    ep = endpoints or get_endpoints()
    return await _fetch_list(http, ep.metadata.industries, "industries")


async def fetch_cities(
    http: httpx.AsyncClient, *, endpoints: ApiEndpoints | None = None
) -> list[Any]:
    ep = endpoints or get_endpoints()
    return await _fetch_list(http, ep.metadata.cities, "cities")
