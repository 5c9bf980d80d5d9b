"""
Chat repository interface.

Defines the contract for chat document persistence (ordered message history).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from hsd_chat.models.chat import Chat
from hsd_chat.models.enums import MessageRole


class IChatRepository(ABC):
    """Abstract interface for chat persistence."""

    @abstractmethod
    async def create_chat(self, user_id: str) -> Chat:
        """
        Create a chat with an empty history.

        Args:
            user_id: Owner user ID

        Returns:
            Created chat

        Raises:
            StorageError: If the store call fails
        """
        pass

    @abstractmethod
    async def get(self, chat_id: str, user_id: str) -> Optional[Chat]:
        """
        Get a chat owned by a user.

        Args:
            chat_id: Chat ID
            user_id: Owner user ID

        Returns:
            Chat if it exists and belongs to user_id, else None
        """
        pass

    @abstractmethod
    async def append_message(
        self,
        chat_id: str,
        user_id: str,
        role: MessageRole,
        text: str,
    ) -> Chat:
        """
        Append a single-part message to a chat history.

        Args:
            chat_id: Chat ID
            user_id: Owner user ID
            role: Message role
            text: Message text

        Returns:
            Updated chat

        Raises:
            NotFoundError: If no chat with chat_id is owned by user_id
        """
        pass

    @abstractmethod
    async def delete_chat(self, chat_id: str, user_id: str) -> bool:
        """
        Delete a chat owned by a user.

        Returns:
            True if a chat was deleted, False if none matched
        """
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> list[Chat]:
        """
        List all chats owned by a user, oldest first.

        Args:
            user_id: Owner user ID

        Returns:
            List of chats
        """
        pass
