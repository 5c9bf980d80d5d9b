"""
Unit tests for SQLite user chat index repository.
"""

import pytest

from hsd_chat.core.exceptions import DuplicateError, InvalidTitleError, NotFoundError
from hsd_chat.infrastructure.local.user_chats_repository import SqliteUserChatsRepository


@pytest.fixture
def repository(db_session):
    """Create repository with test session."""
    def factory():
        class SessionCtx:
            async def __aenter__(self):
                return db_session

            async def __aexit__(self, exc_type, exc_val, exc_tb):
                pass

        return SessionCtx()

    return SqliteUserChatsRepository(session_factory=factory)


# ============================================
# ensure_user / add_entry
# ============================================


class TestEnsureUser:
    """Tests for index document creation."""

    @pytest.mark.asyncio
    async def test_creates_empty_document(self, repository, test_user_id):
        user_chats = await repository.ensure_user(test_user_id)

        assert user_chats.user_id == test_user_id
        assert user_chats.chats == []

    @pytest.mark.asyncio
    async def test_is_idempotent(self, repository, test_user_id):
        await repository.ensure_user(test_user_id)
        await repository.add_entry(test_user_id, "chat-1", "Keep me")

        again = await repository.ensure_user(test_user_id)

        assert [e.id for e in again.chats] == ["chat-1"]

    @pytest.mark.asyncio
    async def test_get_missing_user_returns_none(self, repository):
        assert await repository.get("nobody") is None


class TestAddEntry:
    """Tests for adding index entries."""

    @pytest.mark.asyncio
    async def test_default_titles_count_up(self, repository, test_user_id):
        await repository.ensure_user(test_user_id)

        first = await repository.add_entry(test_user_id, "chat-1")
        second = await repository.add_entry(test_user_id, "chat-2", "   ")

        assert first.title == "Chat 1"
        assert second.title == "Chat 2"

    @pytest.mark.asyncio
    async def test_supplied_title_is_trimmed(self, repository, test_user_id):
        await repository.ensure_user(test_user_id)

        entry = await repository.add_entry(test_user_id, "chat-1", "  Trip plans  ")

        assert entry.title == "Trip plans"
        assert entry.created_at == entry.updated_at

    @pytest.mark.asyncio
    async def test_duplicate_id_rejected(self, repository, test_user_id):
        await repository.ensure_user(test_user_id)
        await repository.add_entry(test_user_id, "chat-1")

        with pytest.raises(DuplicateError):
            await repository.add_entry(test_user_id, "chat-1")

        user_chats = await repository.get(test_user_id)
        assert len(user_chats.chats) == 1

    @pytest.mark.asyncio
    async def test_requires_user_document(self, repository, test_user_id):
        with pytest.raises(NotFoundError) as exc_info:
            await repository.add_entry(test_user_id, "chat-1")

        assert exc_info.value.code == "USER_CHATS_NOT_FOUND"


# ============================================
# touch / rename / remove
# ============================================


class TestTouchEntry:
    """Tests for activity refresh."""

    @pytest.mark.asyncio
    async def test_updated_at_moves_forward(self, repository, test_user_id):
        await repository.ensure_user(test_user_id)
        created = await repository.add_entry(test_user_id, "chat-1")

        touched = await repository.touch_entry(test_user_id, "chat-1")

        assert touched.updated_at > created.updated_at
        assert touched.created_at == created.created_at
        stored = (await repository.get(test_user_id)).find("chat-1")
        assert stored.updated_at == touched.updated_at

    @pytest.mark.asyncio
    async def test_missing_entry_raises(self, repository, test_user_id):
        await repository.ensure_user(test_user_id)

        with pytest.raises(NotFoundError):
            await repository.touch_entry(test_user_id, "missing")

    @pytest.mark.asyncio
    async def test_missing_user_raises(self, repository):
        with pytest.raises(NotFoundError):
            await repository.touch_entry("nobody", "chat-1")


class TestRenameEntry:
    """Tests for renaming."""

    @pytest.mark.asyncio
    async def test_rename_keeps_updated_at(self, repository, test_user_id):
        await repository.ensure_user(test_user_id)
        created = await repository.add_entry(test_user_id, "chat-1")

        renamed = await repository.rename_entry(test_user_id, "chat-1", "  New Name ")

        assert renamed.title == "New Name"
        assert renamed.updated_at == created.updated_at
        assert (await repository.get(test_user_id)).find("chat-1").title == "New Name"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "    ", "x" * 101])
    async def test_invalid_titles_rejected(self, repository, test_user_id, title):
        await repository.ensure_user(test_user_id)
        await repository.add_entry(test_user_id, "chat-1", "Original")

        with pytest.raises(InvalidTitleError):
            await repository.rename_entry(test_user_id, "chat-1", title)

        assert (await repository.get(test_user_id)).find("chat-1").title == "Original"

    @pytest.mark.asyncio
    async def test_title_of_exactly_max_length_accepted(self, repository, test_user_id):
        await repository.ensure_user(test_user_id)
        await repository.add_entry(test_user_id, "chat-1")

        renamed = await repository.rename_entry(test_user_id, "chat-1", "x" * 100)

        assert len(renamed.title) == 100

    @pytest.mark.asyncio
    async def test_missing_entry_raises(self, repository, test_user_id):
        await repository.ensure_user(test_user_id)

        with pytest.raises(NotFoundError):
            await repository.rename_entry(test_user_id, "missing", "Name")


class TestRemoveEntry:
    """Tests for removal."""

    @pytest.mark.asyncio
    async def test_remove_reports_whether_removed(self, repository, test_user_id):
        await repository.ensure_user(test_user_id)
        await repository.add_entry(test_user_id, "chat-1")
        await repository.add_entry(test_user_id, "chat-2")

        assert await repository.remove_entry(test_user_id, "chat-1") is True
        assert await repository.remove_entry(test_user_id, "chat-1") is False
        assert await repository.remove_entry("nobody", "chat-2") is False

        assert (await repository.get(test_user_id)).chat_ids == {"chat-2"}
