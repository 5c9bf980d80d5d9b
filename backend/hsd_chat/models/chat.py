"""
Chat document models.

A chat owns its ordered message history. History is append-only: messages
are never reordered or edited in place.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from hsd_chat.models.enums import MessageRole


class MessagePart(BaseModel):
    """Text segment of a message."""

    text: str = Field(..., min_length=1, description="Segment text")


class Message(BaseModel):
    """Single entry of a chat history."""

    role: MessageRole
    parts: list[MessagePart] = Field(..., min_length=1)

    @classmethod
    def from_text(cls, role: MessageRole, text: str) -> "Message":
        return cls(role=role, parts=[MessagePart(text=text)])

    @property
    def text(self) -> str:
        """Concatenated text of all parts."""
        return "".join(part.text for part in self.parts)


class Chat(BaseModel):
    """Chat model."""

    id: str = Field(..., max_length=100, description="Chat ID (store generated)")
    user_id: str = Field(..., description="Owner user ID")
    history: list[Message] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    """Position of a history page within the whole history."""

    current_page: int
    total_pages: int
    total_messages: int
    has_more: bool
    has_previous: bool


class HistoryPage(BaseModel):
    """One page of a chat history, in chronological order."""

    chat: Chat
    pagination: Pagination
