"""Abstract interfaces for infrastructure abstraction."""

from hsd_chat.interfaces.auth_provider import IAuthProvider, User
from hsd_chat.interfaces.chat_repository import IChatRepository
from hsd_chat.interfaces.transaction import ITransactionRunner, PassthroughTransactionRunner
from hsd_chat.interfaces.user_chats_repository import IUserChatsRepository

__all__ = [
    "IChatRepository",
    "IUserChatsRepository",
    "IAuthProvider",
    "User",
    "ITransactionRunner",
    "PassthroughTransactionRunner",
]
