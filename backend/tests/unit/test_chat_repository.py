"""
Unit tests for SQLite chat repository.
"""

import pytest
from sqlalchemy.exc import OperationalError

from hsd_chat.core.exceptions import NotFoundError, StorageError
from hsd_chat.infrastructure.local.chat_repository import SqliteChatRepository
from hsd_chat.models.enums import MessageRole


@pytest.fixture
def repository(session_factory):
    return SqliteChatRepository(session_factory=session_factory)


@pytest.mark.asyncio
async def test_create_chat_starts_empty(repository, test_user_id):
    chat = await repository.create_chat(test_user_id)

    assert chat.id
    assert chat.user_id == test_user_id
    assert chat.history == []
    assert chat.created_at.tzinfo is not None
    assert chat.updated_at == chat.created_at


@pytest.mark.asyncio
async def test_create_chat_generates_distinct_ids(repository, test_user_id):
    first = await repository.create_chat(test_user_id)
    second = await repository.create_chat(test_user_id)

    assert first.id != second.id


@pytest.mark.asyncio
async def test_append_keeps_insertion_order(repository, test_user_id):
    chat = await repository.create_chat(test_user_id)

    await repository.append_message(chat.id, test_user_id, MessageRole.USER, "hello")
    await repository.append_message(chat.id, test_user_id, MessageRole.MODEL, "hi there")
    updated = await repository.append_message(chat.id, test_user_id, MessageRole.USER, "bye")

    assert [(m.role, m.text) for m in updated.history] == [
        (MessageRole.USER, "hello"),
        (MessageRole.MODEL, "hi there"),
        (MessageRole.USER, "bye"),
    ]
    assert all(len(m.parts) == 1 for m in updated.history)
    assert updated.updated_at > chat.updated_at


@pytest.mark.asyncio
async def test_appended_messages_are_persisted(repository, test_user_id):
    chat = await repository.create_chat(test_user_id)
    await repository.append_message(chat.id, test_user_id, MessageRole.USER, "persist me")

    reloaded = await repository.get(chat.id, test_user_id)

    assert reloaded is not None
    assert reloaded.history[0].parts[0].text == "persist me"


@pytest.mark.asyncio
async def test_append_to_unknown_chat_raises(repository, test_user_id):
    with pytest.raises(NotFoundError):
        await repository.append_message("missing", test_user_id, MessageRole.USER, "x")


@pytest.mark.asyncio
async def test_other_user_cannot_see_or_append(repository, test_user_id, other_user_id):
    chat = await repository.create_chat(test_user_id)

    assert await repository.get(chat.id, other_user_id) is None
    with pytest.raises(NotFoundError):
        await repository.append_message(chat.id, other_user_id, MessageRole.USER, "x")

    owned = await repository.get(chat.id, test_user_id)
    assert owned.history == []


@pytest.mark.asyncio
async def test_delete_chat(repository, test_user_id, other_user_id):
    chat = await repository.create_chat(test_user_id)

    assert await repository.delete_chat(chat.id, other_user_id) is False
    assert await repository.delete_chat(chat.id, test_user_id) is True
    assert await repository.delete_chat(chat.id, test_user_id) is False
    assert await repository.get(chat.id, test_user_id) is None


@pytest.mark.asyncio
async def test_list_by_user_only_returns_owned_chats(repository, test_user_id, other_user_id):
    mine = [await repository.create_chat(test_user_id) for _ in range(3)]
    await repository.create_chat(other_user_id)

    chats = await repository.list_by_user(test_user_id)

    assert {c.id for c in chats} == {c.id for c in mine}
    assert all(c.user_id == test_user_id for c in chats)


@pytest.mark.asyncio
async def test_store_failures_become_storage_errors(test_user_id):
    class FailingSession:
        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc_val, exc_tb):
            pass

        def add(self, _obj):
            pass

        async def commit(self):
            raise OperationalError("INSERT", {}, Exception("database is locked"))

    repository = SqliteChatRepository(session_factory=FailingSession)

    with pytest.raises(StorageError) as exc_info:
        await repository.create_chat(test_user_id)

    assert exc_info.value.code == "DATABASE_ERROR"
