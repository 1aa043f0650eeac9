"""Student analytics and the points leaderboard (bearer-authenticated)."""

from __future__ import annotations

from typing import Any

from talentspal.client import AuthenticatedClient
from talentspal.errors import response_data


async def get_student_analytics(client: AuthenticatedClient, time_range: str = "all") -> Any:
    resp = await client.get(client.endpoints.analytics.student, params={"timeRange": time_range})
    return response_data(resp)


async def get_leaderboard(
    client: AuthenticatedClient,
    category: str = "all",
    time_range: str = "all",
    limit: int = 10,
) -> Any:
    resp = await client.get(
        client.endpoints.analytics.leaderboard,
        params={"category": category, "timeRange": time_range, "limit": limit},
    )
    return response_data(resp)


async def get_user_leaderboard_position(
    client: AuthenticatedClient, category: str = "all", time_range: str = "all"
) -> Any:
    resp = await client.get(
        client.endpoints.analytics.leaderboard_position,
        params={"category": category, "timeRange": time_range},
    )
    return response_data(resp)
