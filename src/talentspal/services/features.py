"""
Daily challenges and achievements.

These endpoints require a logged-in user, so every call goes through the
AuthenticatedClient and benefits from transparent token refresh.
"""

from __future__ import annotations

from typing import Any

from talentspal.client import AuthenticatedClient
from talentspal.errors import response_data, response_json


async def get_today_challenge(client: AuthenticatedClient) -> Any:
    return response_data(await client.get(client.endpoints.challenges.today))


async def submit_challenge_answer(client: AuthenticatedClient, user_answer: str) -> Any:
    resp = await client.post(
        client.endpoints.challenges.submit, json={"userAnswer": user_answer}
    )
    return response_json(resp)


async def get_user_streak(client: AuthenticatedClient) -> Any:
    return response_data(await client.get(client.endpoints.challenges.streak))


async def get_challenge_history(
    client: AuthenticatedClient, page: int = 1, limit: int = 10
) -> Any:
    resp = await client.get(
        client.endpoints.challenges.history, params={"page": page, "limit": limit}
    )
    return response_data(resp)


async def get_user_achievements(client: AuthenticatedClient) -> Any:
    return response_data(await client.get(client.endpoints.achievements.list))


async def get_achievement_progress(client: AuthenticatedClient) -> Any:
    return response_data(await client.get(client.endpoints.achievements.progress))
