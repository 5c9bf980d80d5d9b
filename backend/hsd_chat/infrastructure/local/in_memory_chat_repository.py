"""In-memory chat repository implementation."""

from typing import Optional
from uuid import uuid4

from hsd_chat.core.exceptions import NotFoundError
from hsd_chat.interfaces.chat_repository import IChatRepository
from hsd_chat.models.chat import Chat, Message
from hsd_chat.models.enums import MessageRole
from hsd_chat.utils.datetime_utils import later_than, now_utc


class InMemoryChatRepository(IChatRepository):
    """In-memory implementation of chat repository.

    Stores chats in a dictionary. Suitable for development and testing.
    Returned chats are copies; mutating them does not change stored state.
    """

    def __init__(self):
        self._chats: dict[str, Chat] = {}

    def _owned(self, chat_id: str, user_id: str) -> Optional[Chat]:
        chat = self._chats.get(chat_id)
        if chat and chat.user_id == user_id:
            return chat
        return None

    async def create_chat(self, user_id: str) -> Chat:
        """Create a chat with an empty history."""
        now = now_utc()
        chat = Chat(id=str(uuid4()), user_id=user_id, history=[], created_at=now, updated_at=now)
        self._chats[chat.id] = chat
        return chat.model_copy(deep=True)

    async def get(self, chat_id: str, user_id: str) -> Optional[Chat]:
        """Get a chat owned by a user."""
        chat = self._owned(chat_id, user_id)
        return chat.model_copy(deep=True) if chat else None

    async def append_message(
        self,
        chat_id: str,
        user_id: str,
        role: MessageRole,
        text: str,
    ) -> Chat:
        """Append a message to the end of a chat history."""
        chat = self._owned(chat_id, user_id)
        if not chat:
            raise NotFoundError(f"Chat {chat_id} not found")

        chat.history.append(Message.from_text(MessageRole(role), text))
        chat.updated_at = later_than(chat.updated_at)
        return chat.model_copy(deep=True)

    async def delete_chat(self, chat_id: str, user_id: str) -> bool:
        """Delete a chat owned by a user."""
        if self._owned(chat_id, user_id):
            del self._chats[chat_id]
            return True
        return False

    async def list_by_user(self, user_id: str) -> list[Chat]:
        """List all chats owned by a user, oldest first."""
        chats = [c for c in self._chats.values() if c.user_id == user_id]
        chats.sort(key=lambda c: c.created_at)
        return [c.model_copy(deep=True) for c in chats]
