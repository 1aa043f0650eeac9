from __future__ import annotations

from typing import Any

import httpx

from talentspal.api.endpoints import ApiEndpoints, get_endpoints, get_headers
from talentspal.errors import ApiError, response_json
from talentspal.utils.log import logger


async def get_companies(
    http: httpx.AsyncClient,
    *,
    city: str | None = None,
    search: str | None = None,
    endpoints: ApiEndpoints | None = None,
) -> dict[str, Any]:
    """Public company listing, optionally filtered by city and free-text search."""
    ep = endpoints or get_endpoints()
    params: dict[str, str] = {}
    if city:
        params["city"] = city
    if search:
        params["search"] = search
    resp = await http.get(ep.companies.list, params=params, headers=get_headers())
    if not resp.is_success:
        logger.warning("companies_list_failed", status=resp.status_code)
        raise ApiError.from_response(resp, default="Failed to fetch companies")
    return response_json(resp) or {}


async def get_company(
    http: httpx.AsyncClient,
    company_id: str,
    *,
    endpoints: ApiEndpoints | None = None,
) -> dict[str, Any]:
    ep = endpoints or get_endpoints()
    resp = await http.get(ep.companies.details(company_id), headers=get_headers())
    if not resp.is_success:
        logger.warning("company_details_failed", status=resp.status_code, company_id=company_id)
        raise ApiError.from_response(resp, default="Failed to fetch company details")
    return response_json(resp) or {}
