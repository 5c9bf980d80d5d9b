"""
API tests for the user chats endpoints.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from hsd_chat.api.deps import get_auth_provider, get_chat_repository, get_user_chats_repository
from hsd_chat.infrastructure.local.in_memory_chat_repository import InMemoryChatRepository
from hsd_chat.infrastructure.local.in_memory_user_chats_repository import (
    InMemoryUserChatsRepository,
)
from hsd_chat.infrastructure.local.mock_auth import MockAuthProvider
from main import app


@pytest_asyncio.fixture
async def client():
    chat_repo = InMemoryChatRepository()
    user_chats_repo = InMemoryUserChatsRepository()
    app.dependency_overrides[get_chat_repository] = lambda: chat_repo
    app.dependency_overrides[get_user_chats_repository] = lambda: user_chats_repo
    app.dependency_overrides[get_auth_provider] = lambda: MockAuthProvider()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_id}"}


async def start_chat(client, user_id: str, text: str) -> str:
    response = await client.post("/api/v1/chats", json={"text": text}, headers=auth(user_id))
    assert response.status_code == 200, response.text
    return response.json()["chat"]["id"]


@pytest.mark.asyncio
async def test_list_is_sorted_by_recent_activity(client, test_user_id):
    older = await start_chat(client, test_user_id, "older chat")
    newer = await start_chat(client, test_user_id, "newer chat")
    await client.post(
        "/api/v1/chats", json={"text": "bump", "chat_id": older}, headers=auth(test_user_id)
    )

    response = await client.get(f"/api/v1/user-chats/{test_user_id}", headers=auth(test_user_id))

    assert response.status_code == 200
    user_chats = response.json()["user_chats"]
    assert user_chats["user_id"] == test_user_id
    assert [entry["id"] for entry in user_chats["chats"]] == [older, newer]


@pytest.mark.asyncio
async def test_list_for_user_without_chats(client, test_user_id):
    response = await client.get(f"/api/v1/user-chats/{test_user_id}", headers=auth(test_user_id))

    assert response.status_code == 404
    assert response.json()["code"] == "USER_CHATS_NOT_FOUND"


@pytest.mark.asyncio
async def test_list_of_other_user_is_forbidden(client, test_user_id, other_user_id):
    response = await client.get(f"/api/v1/user-chats/{other_user_id}", headers=auth(test_user_id))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_rename(client, test_user_id):
    chat_id = await start_chat(client, test_user_id, "hello")

    response = await client.put(
        f"/api/v1/user-chats/{test_user_id}/update-chat-title",
        json={"chat_id": chat_id, "new_title": "  New Name  "},
        headers=auth(test_user_id),
    )

    assert response.status_code == 200, response.text
    assert response.json()["chat"]["title"] == "New Name"
    listing = await client.get(f"/api/v1/user-chats/{test_user_id}", headers=auth(test_user_id))
    assert listing.json()["user_chats"]["chats"][0]["title"] == "New Name"


@pytest.mark.asyncio
@pytest.mark.parametrize("title", ["", "   ", "x" * 101])
async def test_rename_rejects_invalid_titles(client, test_user_id, title):
    chat_id = await start_chat(client, test_user_id, "hello")

    response = await client.put(
        f"/api/v1/user-chats/{test_user_id}/update-chat-title",
        json={"chat_id": chat_id, "new_title": title},
        headers=auth(test_user_id),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_TITLE"


@pytest.mark.asyncio
async def test_rename_unknown_chat(client, test_user_id):
    await start_chat(client, test_user_id, "hello")

    response = await client.put(
        f"/api/v1/user-chats/{test_user_id}/update-chat-title",
        json={"chat_id": "missing", "new_title": "Name"},
        headers=auth(test_user_id),
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_remove_twice(client, test_user_id):
    chat_id = await start_chat(client, test_user_id, "hello")
    url = f"/api/v1/user-chats/{test_user_id}/remove-chat"

    first = await client.post(url, json={"chat_id": chat_id}, headers=auth(test_user_id))
    second = await client.post(url, json={"chat_id": chat_id}, headers=auth(test_user_id))

    assert first.status_code == 200
    assert first.json() == {"message": "Chat removed successfully"}
    assert second.status_code == 404
    listing = await client.get(f"/api/v1/user-chats/{test_user_id}", headers=auth(test_user_id))
    assert listing.json()["user_chats"]["chats"] == []


@pytest.mark.asyncio
async def test_remove_requires_chat_id(client, test_user_id):
    response = await client.post(
        f"/api/v1/user-chats/{test_user_id}/remove-chat", json={}, headers=auth(test_user_id)
    )

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "chat_id"


@pytest.mark.asyncio
async def test_rename_error_carries_details(client, test_user_id):
    chat_id = await start_chat(client, test_user_id, "hello")

    response = await client.put(
        f"/api/v1/user-chats/{test_user_id}/update-chat-title",
        json={"chat_id": chat_id, "new_title": "x" * 101},
        headers=auth(test_user_id),
    )

    assert response.status_code == 400
    assert response.json()["details"] == {"length": 101, "max_length": 100}
