"""
User chat index repository interface.

One document per user holds the summaries (id, title, timestamps) of the
chats that user owns.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from hsd_chat.models.user_chats import UserChatEntry, UserChats


class IUserChatsRepository(ABC):
    """Abstract interface for the per-user chat index."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserChats]:
        """Get the index document of a user, or None if none exists."""
        pass

    @abstractmethod
    async def ensure_user(self, user_id: str) -> UserChats:
        """
        Create an empty index document for a user if none exists.

        Idempotent.
        """
        pass

    @abstractmethod
    async def add_entry(
        self,
        user_id: str,
        chat_id: str,
        title: Optional[str] = None,
    ) -> UserChatEntry:
        """
        Add an entry for a new chat.

        Args:
            user_id: Owner user ID
            chat_id: Chat ID of the new chat
            title: Optional title; defaults to "Chat {N}"

        Returns:
            Created entry

        Raises:
            NotFoundError: If the user has no index document
            DuplicateError: If an entry with chat_id already exists
        """
        pass

    @abstractmethod
    async def touch_entry(self, user_id: str, chat_id: str) -> UserChatEntry:
        """
        Refresh the updated_at timestamp of an entry.

        Raises:
            NotFoundError: If the user document or the entry is missing
        """
        pass

    @abstractmethod
    async def rename_entry(
        self,
        user_id: str,
        chat_id: str,
        new_title: str,
    ) -> UserChatEntry:
        """
        Change the title of an entry. updated_at is left unchanged.

        Raises:
            InvalidTitleError: If the trimmed title is empty or too long
            NotFoundError: If the user document or the entry is missing
        """
        pass

    @abstractmethod
    async def remove_entry(self, user_id: str, chat_id: str) -> bool:
        """
        Remove an entry.

        Returns:
            True if an entry was removed
        """
        pass
