"""
Chats API endpoints.

Save messages (starting a new chat or continuing one) and read a chat
history page by page.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Path, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator

from hsd_chat.api.deps import ChatService, CurrentUser, ensure_same_user
from hsd_chat.core.config import get_settings
from hsd_chat.core.exceptions import AuthorizationError
from hsd_chat.models.chat import Chat, HistoryPage
from hsd_chat.models.enums import MessageRole
from hsd_chat.utils.text_utils import MAX_TITLE_LENGTH, strip_script_tags

router = APIRouter()

ID_PATTERN = r"^[a-zA-Z0-9_-]+$"

UserIdPath = Annotated[str, Path(min_length=1, max_length=100, pattern=ID_PATTERN)]
ChatIdPath = Annotated[str, Path(min_length=1, max_length=100, pattern=ID_PATTERN)]


# ===========================================
# Request / Response Models
# ===========================================


class ChatMessageRequest(BaseModel):
    """Message to save. Without chat_id a new chat is started."""

    model_config = ConfigDict(extra="ignore")

    text: str
    role: MessageRole = MessageRole.USER
    chat_id: Optional[str] = Field(None, min_length=1, max_length=100, pattern=ID_PATTERN)
    title: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator("text")
    @classmethod
    def _clean_text(cls, value: str) -> str:
        max_length = get_settings().MAX_MESSAGE_LENGTH
        cleaned = strip_script_tags(value.strip()).strip()
        if not 1 <= len(cleaned) <= max_length:
            raise ValueError(f"text must be between 1 and {max_length:,} characters")
        return cleaned

    @field_validator("chat_id", mode="before")
    @classmethod
    def _trim_chat_id(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if isinstance(value, str) else value

    @field_validator("title")
    @classmethod
    def _clean_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        trimmed = value.strip()
        if not 1 <= len(trimmed) <= MAX_TITLE_LENGTH:
            raise ValueError(f"Title must be between 1 and {MAX_TITLE_LENGTH} characters")
        return trimmed


class SaveMessageResponse(BaseModel):
    """Response after a message is saved."""

    message: str
    chat: Chat


# ===========================================
# Endpoints
# ===========================================


@router.post("", response_model=SaveMessageResponse)
async def save_message(
    request: ChatMessageRequest,
    user: CurrentUser,
    service: ChatService,
):
    """Save a message, creating the chat and its index entry when needed."""
    if request.user_id and request.user_id != user.id:
        raise AuthorizationError("Access denied - user ID mismatch")

    chat = await service.post_message(
        user_id=user.id,
        text=request.text,
        role=request.role,
        chat_id=request.chat_id,
        title=request.title,
    )
    return SaveMessageResponse(message="Message saved", chat=chat)


@router.get("/{user_id}/{chat_id}", response_model=HistoryPage)
async def get_chat_history(
    user_id: UserIdPath,
    chat_id: ChatIdPath,
    user: CurrentUser,
    service: ChatService,
    page: int = Query(1, description="Page number, 1 = newest messages"),
    limit: Optional[int] = Query(None, description="Messages per page"),
):
    """Get one page of a chat history."""
    ensure_same_user(user_id, user)
    return await service.get_history_page(chat_id, user.id, page=page, page_size=limit)
