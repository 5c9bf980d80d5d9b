"""
SQLite implementation of Chat repository.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from hsd_chat.core.exceptions import NotFoundError
from hsd_chat.infrastructure.local.database import (
    ChatMessageORM,
    ChatORM,
    get_session_factory,
    storage_errors,
)
from hsd_chat.interfaces.chat_repository import IChatRepository
from hsd_chat.models.chat import Chat, Message, MessagePart
from hsd_chat.models.enums import MessageRole
from hsd_chat.utils.datetime_utils import ensure_utc, later_than, now_utc


class SqliteChatRepository(IChatRepository):
    """SQLite implementation of chat repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _orm_to_model(self, orm: ChatORM, message_orms: list[ChatMessageORM]) -> Chat:
        """Convert ORM objects to Pydantic model."""
        return Chat(
            id=orm.id,
            user_id=orm.user_id,
            history=[
                Message(
                    role=MessageRole(m.role),
                    parts=[MessagePart.model_validate(part) for part in m.parts],
                )
                for m in message_orms
            ],
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    async def _get_orm(self, session: AsyncSession, chat_id: str, user_id: str) -> Optional[ChatORM]:
        result = await session.execute(
            select(ChatORM).where(
                and_(ChatORM.id == chat_id, ChatORM.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    async def _get_messages(self, session: AsyncSession, chat_ids: list[str]) -> list[ChatMessageORM]:
        if not chat_ids:
            return []
        result = await session.execute(
            select(ChatMessageORM)
            .where(ChatMessageORM.chat_id.in_(chat_ids))
            .order_by(ChatMessageORM.seq)
        )
        return list(result.scalars().all())

    async def create_chat(self, user_id: str) -> Chat:
        """Create a chat with an empty history."""
        async with storage_errors("create_chat"), self._session_factory() as session:
            now = now_utc()
            orm = ChatORM(user_id=user_id, created_at=now, updated_at=now)
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm, [])

    async def get(self, chat_id: str, user_id: str) -> Optional[Chat]:
        """Get a chat owned by a user."""
        async with storage_errors("get_chat"), self._session_factory() as session:
            orm = await self._get_orm(session, chat_id, user_id)
            if not orm:
                return None
            return self._orm_to_model(orm, await self._get_messages(session, [orm.id]))

    async def append_message(
        self,
        chat_id: str,
        user_id: str,
        role: MessageRole,
        text: str,
    ) -> Chat:
        """Append a message to the end of a chat history.

        The message is a new row; the history already stored is never
        rewritten.
        """
        async with storage_errors("append_message"), self._session_factory() as session:
            orm = await self._get_orm(session, chat_id, user_id)
            if not orm:
                raise NotFoundError(f"Chat {chat_id} not found")

            message = Message.from_text(MessageRole(role), text)
            session.add(
                ChatMessageORM(
                    chat_id=chat_id,
                    role=message.role.value,
                    parts=[part.model_dump(mode="json") for part in message.parts],
                    created_at=now_utc(),
                )
            )
            orm.updated_at = later_than(orm.updated_at)

            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm, await self._get_messages(session, [chat_id]))

    async def delete_chat(self, chat_id: str, user_id: str) -> bool:
        """Delete a chat owned by a user, messages first."""
        async with storage_errors("delete_chat"), self._session_factory() as session:
            orm = await self._get_orm(session, chat_id, user_id)
            if not orm:
                return False

            await session.execute(
                delete(ChatMessageORM).where(ChatMessageORM.chat_id == chat_id)
            )
            await session.delete(orm)
            await session.commit()
            return True

    async def list_by_user(self, user_id: str) -> list[Chat]:
        """List all chats owned by a user, oldest first."""
        async with storage_errors("list_chats"), self._session_factory() as session:
            result = await session.execute(
                select(ChatORM)
                .where(ChatORM.user_id == user_id)
                .order_by(ChatORM.created_at.asc())
            )
            orms = list(result.scalars().all())

            by_chat: dict[str, list[ChatMessageORM]] = {orm.id: [] for orm in orms}
            for message_orm in await self._get_messages(session, list(by_chat)):
                by_chat[message_orm.chat_id].append(message_orm)
            return [self._orm_to_model(orm, by_chat[orm.id]) for orm in orms]
