"""
User chats API endpoints.

Endpoints for a user's chat list: listing, renaming and removing chats.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from hsd_chat.api.chats import ID_PATTERN, UserIdPath
from hsd_chat.api.deps import ChatService, CurrentUser, ensure_same_user
from hsd_chat.models.user_chats import UserChatEntry, UserChats

router = APIRouter()


# ===========================================
# Request / Response Models
# ===========================================


class UpdateChatTitleRequest(BaseModel):
    """Rename request. Title length is checked after trimming by the service."""

    chat_id: str = Field(..., min_length=1, max_length=100, pattern=ID_PATTERN)
    new_title: str


class RemoveChatRequest(BaseModel):
    """Remove request."""

    chat_id: str = Field(..., min_length=1, max_length=100, pattern=ID_PATTERN)


class UserChatsResponse(BaseModel):
    """A user's chat list."""

    user_chats: UserChats


class UpdateChatTitleResponse(BaseModel):
    """Response after a rename."""

    message: str
    chat: UserChatEntry


class MessageResponse(BaseModel):
    """Plain confirmation."""

    message: str


# ===========================================
# Endpoints
# ===========================================


@router.get("/{user_id}", response_model=UserChatsResponse)
async def list_user_chats(
    user_id: UserIdPath,
    user: CurrentUser,
    service: ChatService,
):
    """List a user's chats, most recently updated first."""
    ensure_same_user(user_id, user)
    return UserChatsResponse(user_chats=await service.get_user_chats(user.id))


@router.put("/{user_id}/update-chat-title", response_model=UpdateChatTitleResponse)
async def update_chat_title(
    user_id: UserIdPath,
    request: UpdateChatTitleRequest,
    user: CurrentUser,
    service: ChatService,
):
    """Rename a chat."""
    ensure_same_user(user_id, user)
    entry = await service.rename_chat(user.id, request.chat_id, request.new_title)
    return UpdateChatTitleResponse(message="Chat title updated", chat=entry)


@router.post("/{user_id}/remove-chat", response_model=MessageResponse)
async def remove_chat(
    user_id: UserIdPath,
    request: RemoveChatRequest,
    user: CurrentUser,
    service: ChatService,
):
    """Delete a chat and remove it from the user's chat list."""
    ensure_same_user(user_id, user)
    await service.delete_chat(user.id, request.chat_id)
    return MessageResponse(message="Chat removed successfully")
