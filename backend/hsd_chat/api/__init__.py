"""API routers."""

from hsd_chat.api import chats, user_chats

__all__ = [
    "chats",
    "user_chats",
]
