"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header

from hsd_chat.core.config import Settings, get_settings
from hsd_chat.core.exceptions import AuthenticationError, AuthorizationError
from hsd_chat.interfaces.auth_provider import IAuthProvider, User
from hsd_chat.interfaces.chat_repository import IChatRepository
from hsd_chat.interfaces.transaction import ITransactionRunner, PassthroughTransactionRunner
from hsd_chat.interfaces.user_chats_repository import IUserChatsRepository
from hsd_chat.services.chat_consistency_service import ChatConsistencyService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_chat_repository() -> IChatRepository:
    """Get chat repository instance."""
    settings = get_settings()
    if settings.uses_memory_storage:
        from hsd_chat.infrastructure.local.in_memory_chat_repository import InMemoryChatRepository
        return InMemoryChatRepository()
    else:
        from hsd_chat.infrastructure.local.chat_repository import SqliteChatRepository
        return SqliteChatRepository()


@lru_cache()
def get_user_chats_repository() -> IUserChatsRepository:
    """Get user chat index repository instance."""
    settings = get_settings()
    if settings.uses_memory_storage:
        from hsd_chat.infrastructure.local.in_memory_user_chats_repository import (
            InMemoryUserChatsRepository,
        )
        return InMemoryUserChatsRepository()
    else:
        from hsd_chat.infrastructure.local.user_chats_repository import SqliteUserChatsRepository
        return SqliteUserChatsRepository()


@lru_cache()
def get_transaction_runner() -> ITransactionRunner:
    """Get transaction runner. Neither backend spans two repositories in one transaction."""
    return PassthroughTransactionRunner()


# ===========================================
# Service Dependencies
# ===========================================


def get_chat_service(
    chat_repo: Annotated[IChatRepository, Depends(get_chat_repository)],
    user_chats_repo: Annotated[IUserChatsRepository, Depends(get_user_chats_repository)],
    transactions: Annotated[ITransactionRunner, Depends(get_transaction_runner)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ChatConsistencyService:
    """Build the chat consistency service over the configured repositories."""
    return ChatConsistencyService(
        chat_repo=chat_repo,
        user_chats_repo=user_chats_repo,
        transactions=transactions,
        default_page_size=settings.DEFAULT_PAGE_SIZE,
    )


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    if settings.AUTH_PROVIDER == "jwt":
        from hsd_chat.infrastructure.auth.jwt_auth import JwtAuthProvider

        return JwtAuthProvider(settings)

    from hsd_chat.infrastructure.local.mock_auth import MockAuthProvider
    return MockAuthProvider(enabled=True)


# ===========================================
# User Authentication
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Get current authenticated user.

    With the mock provider the bearer token is the user ID; with the jwt
    provider the token signature, expiry and issuer are verified.
    """
    if not auth_provider.is_enabled():
        # Mock user for development
        return User(id="dev_user", email="dev@example.com")

    if not authorization:
        raise AuthenticationError("Authentication required", code="AUTH_REQUIRED")

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise AuthenticationError("Invalid authorization header format", code="AUTH_REQUIRED")

    return await auth_provider.verify_token(token)


def ensure_same_user(user_id: str, user: User) -> None:
    """Reject access to another user's resources."""
    if user_id != user.id:
        raise AuthorizationError("Access denied - insufficient permissions")


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

ChatService = Annotated[ChatConsistencyService, Depends(get_chat_service)]
CurrentUser = Annotated[User, Depends(get_current_user)]
