from __future__ import annotations

from typing import Any

from talentspal.client import AuthenticatedClient
from talentspal.errors import response_data


async def get_practice_questions(
    client: AuthenticatedClient,
    *,
    category: str | None = None,
    difficulty: str | None = None,
    company: str | None = None,
    tags: list[str] | None = None,
    page: int = 1,
    limit: int = 20,
) -> Any:
    """
    Filtered, paginated practice questions.

    Empty filters are left out of the query; tags go as one comma-joined value.
    """
    params: dict[str, Any] = {}
    if category:
        params["category"] = category
    if difficulty:
        params["difficulty"] = difficulty
    if company:
        params["company"] = company
    if tags:
        params["tags"] = ",".join(tags)
    params["page"] = page
    params["limit"] = limit
    return response_data(await client.get(client.endpoints.practice.questions, params=params))


async def get_available_companies(client: AuthenticatedClient) -> Any:
    return response_data(await client.get(client.endpoints.practice.companies))


async def get_available_tags(client: AuthenticatedClient) -> Any:
    return response_data(await client.get(client.endpoints.practice.tags))


async def check_practice_answer(
    client: AuthenticatedClient, question_id: int, user_answer: str
) -> Any:
    resp = await client.post(
        client.endpoints.practice.check_answer,
        json={"questionId": question_id, "userAnswer": user_answer},
    )
    return response_data(resp)
