"""
Exam results: per-category stats, attempt history and the score leaderboard.

Unlike the analytics calls these raise `ApiError` on a non-OK response.
"""

from __future__ import annotations

from typing import Any

import httpx

from talentspal.client import AuthenticatedClient
from talentspal.errors import ApiError, response_json
from talentspal.utils.log import logger


def _checked(resp: httpx.Response, *, default: str, event: str) -> dict[str, Any]:
    if not resp.is_success:
        logger.warning(event, status=resp.status_code)
        raise ApiError.from_response(resp, default=default)
    body = response_json(resp)
    return body if isinstance(body, dict) else {}


async def get_user_stats(
    client: AuthenticatedClient, category: str | None = None
) -> list[Any]:
    params = {"category": category} if category else None
    resp = await client.get(client.endpoints.questions.user_stats, params=params)
    body = _checked(resp, default="Failed to fetch user stats", event="question_stats_failed")
    return body.get("stats") or []


async def get_user_test_history(
    client: AuthenticatedClient,
    category: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> dict[str, Any]:
    params: dict[str, Any] = {"page": page, "limit": limit}
    if category:
        params["category"] = category
    resp = await client.get(client.endpoints.questions.history, params=params)
    return _checked(resp, default="Failed to fetch test history", event="question_history_failed")


async def get_leaderboard(
    client: AuthenticatedClient, category: str = "backend", limit: int = 10
) -> list[Any]:
    resp = await client.get(
        client.endpoints.questions.leaderboard,
        params={"category": category, "limit": limit},
    )
    body = _checked(
        resp, default="Failed to fetch leaderboard", event="question_leaderboard_failed"
    )
    return body.get("leaderboard") or []
