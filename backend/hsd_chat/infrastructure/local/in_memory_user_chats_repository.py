"""In-memory user chat index implementation."""

from typing import Optional

from hsd_chat.core.exceptions import DuplicateError, NotFoundError
from hsd_chat.interfaces.user_chats_repository import IUserChatsRepository
from hsd_chat.models.user_chats import UserChatEntry, UserChats
from hsd_chat.utils.datetime_utils import later_than, now_utc
from hsd_chat.utils.text_utils import default_title, normalize_title

USER_CHATS_NOT_FOUND = "USER_CHATS_NOT_FOUND"


class InMemoryUserChatsRepository(IUserChatsRepository):
    """In-memory implementation of the user chat index.

    One UserChats document per user in a dictionary. Suitable for
    development and testing.
    """

    def __init__(self):
        self._docs: dict[str, UserChats] = {}

    def _require(self, user_id: str) -> UserChats:
        doc = self._docs.get(user_id)
        if not doc:
            raise NotFoundError(f"No chats found for user {user_id}", code=USER_CHATS_NOT_FOUND)
        return doc

    def _require_entry(self, user_id: str, chat_id: str) -> UserChatEntry:
        entry = self._require(user_id).find(chat_id)
        if not entry:
            raise NotFoundError(f"Chat {chat_id} not found in user chats")
        return entry

    async def get(self, user_id: str) -> Optional[UserChats]:
        """Get the index document of a user."""
        doc = self._docs.get(user_id)
        return doc.model_copy(deep=True) if doc else None

    async def ensure_user(self, user_id: str) -> UserChats:
        """Create an empty index document if none exists."""
        if user_id not in self._docs:
            now = now_utc()
            self._docs[user_id] = UserChats(user_id=user_id, chats=[], created_at=now, updated_at=now)
        return self._docs[user_id].model_copy(deep=True)

    async def add_entry(
        self,
        user_id: str,
        chat_id: str,
        title: Optional[str] = None,
    ) -> UserChatEntry:
        """Add an entry for a new chat."""
        doc = self._require(user_id)
        if doc.find(chat_id):
            raise DuplicateError(f"Chat {chat_id} is already indexed")

        if not title or not title.strip():
            title = default_title(len(doc.chats))
        now = now_utc()
        entry = UserChatEntry(id=chat_id, title=normalize_title(title), created_at=now, updated_at=now)
        doc.chats.append(entry)
        doc.updated_at = now
        return entry.model_copy()

    async def touch_entry(self, user_id: str, chat_id: str) -> UserChatEntry:
        """Refresh the updated_at timestamp of an entry."""
        entry = self._require_entry(user_id, chat_id)
        entry.updated_at = later_than(entry.updated_at)
        return entry.model_copy()

    async def rename_entry(
        self,
        user_id: str,
        chat_id: str,
        new_title: str,
    ) -> UserChatEntry:
        """Change the title of an entry without touching updated_at."""
        title = normalize_title(new_title)
        entry = self._require_entry(user_id, chat_id)
        entry.title = title
        return entry.model_copy()

    async def remove_entry(self, user_id: str, chat_id: str) -> bool:
        """Remove an entry."""
        doc = self._docs.get(user_id)
        if not doc or not doc.find(chat_id):
            return False
        doc.chats = [entry for entry in doc.chats if entry.id != chat_id]
        doc.updated_at = now_utc()
        return True
