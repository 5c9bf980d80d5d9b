"""Pydantic models (schemas) for the application."""

from hsd_chat.models.enums import MessageRole
from hsd_chat.models.chat import Chat, HistoryPage, Message, MessagePart, Pagination
from hsd_chat.models.user_chats import IndexAudit, UserChatEntry, UserChats

__all__ = [
    # Enums
    "MessageRole",
    # Chat
    "Chat",
    "Message",
    "MessagePart",
    "Pagination",
    "HistoryPage",
    # User chat index
    "UserChats",
    "UserChatEntry",
    "IndexAudit",
]
