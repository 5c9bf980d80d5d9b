"""
Per-user chat index models.

Each user has one UserChats document listing summaries of the chats they own.
Entry ``id`` equals the ``Chat.id`` it summarizes.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class UserChatEntry(BaseModel):
    """Summary of one chat in a user's index."""

    id: str = Field(..., max_length=100, description="Chat ID")
    title: str = Field(..., min_length=1, max_length=100, description="Chat title")
    created_at: datetime
    updated_at: datetime


class UserChats(BaseModel):
    """Chat index of one user."""

    user_id: str = Field(..., description="Owner user ID")
    chats: list[UserChatEntry] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    def find(self, chat_id: str) -> UserChatEntry | None:
        for entry in self.chats:
            if entry.id == chat_id:
                return entry
        return None

    @property
    def chat_ids(self) -> set[str]:
        return {entry.id for entry in self.chats}


class IndexAudit(BaseModel):
    """Differences between a user's chats and their chat index."""

    user_id: str
    orphan_chat_ids: list[str] = Field(
        default_factory=list, description="Chats with no index entry"
    )
    dangling_entry_ids: list[str] = Field(
        default_factory=list, description="Index entries with no chat"
    )
    removed_entry_ids: list[str] = Field(default_factory=list)
    deleted_chat_ids: list[str] = Field(default_factory=list)
    reindexed_chat_ids: list[str] = Field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return not self.orphan_chat_ids and not self.dangling_entry_ids
