"""
SQLite implementation of the user chat index repository.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hsd_chat.core.exceptions import DuplicateError, NotFoundError
from hsd_chat.infrastructure.local.database import (
    UserChatEntryORM,
    UserChatsORM,
    get_session_factory,
    storage_errors,
)
from hsd_chat.interfaces.user_chats_repository import IUserChatsRepository
from hsd_chat.models.user_chats import UserChatEntry, UserChats
from hsd_chat.utils.datetime_utils import ensure_utc, later_than, now_utc
from hsd_chat.utils.text_utils import default_title, normalize_title

USER_CHATS_NOT_FOUND = "USER_CHATS_NOT_FOUND"


class SqliteUserChatsRepository(IUserChatsRepository):
    """SQLite implementation of the user chat index.

    Each entry is its own row keyed by (user_id, chat_id), so adding,
    touching, renaming and removing entries never rewrites other entries.
    """

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    def _entry_to_model(self, orm: UserChatEntryORM) -> UserChatEntry:
        return UserChatEntry(
            id=orm.chat_id,
            title=orm.title,
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    def _orm_to_model(self, orm: UserChatsORM, entries: list[UserChatEntryORM]) -> UserChats:
        """Convert ORM objects to Pydantic model."""
        return UserChats(
            user_id=orm.user_id,
            chats=[self._entry_to_model(entry) for entry in entries],
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    async def _get_orm(self, session: AsyncSession, user_id: str) -> Optional[UserChatsORM]:
        result = await session.execute(
            select(UserChatsORM).where(UserChatsORM.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def _require_orm(self, session: AsyncSession, user_id: str) -> UserChatsORM:
        orm = await self._get_orm(session, user_id)
        if not orm:
            raise NotFoundError(f"No chats found for user {user_id}", code=USER_CHATS_NOT_FOUND)
        return orm

    async def _get_entries(self, session: AsyncSession, user_id: str) -> list[UserChatEntryORM]:
        result = await session.execute(
            select(UserChatEntryORM)
            .where(UserChatEntryORM.user_id == user_id)
            .order_by(UserChatEntryORM.seq)
        )
        return list(result.scalars().all())

    async def _require_entry(
        self, session: AsyncSession, user_id: str, chat_id: str
    ) -> UserChatEntryORM:
        await self._require_orm(session, user_id)
        result = await session.execute(
            select(UserChatEntryORM).where(
                and_(UserChatEntryORM.user_id == user_id, UserChatEntryORM.chat_id == chat_id)
            )
        )
        entry = result.scalar_one_or_none()
        if not entry:
            raise NotFoundError(f"Chat {chat_id} not found in user chats")
        return entry

    async def get(self, user_id: str) -> Optional[UserChats]:
        """Get the index document of a user."""
        async with storage_errors("get_user_chats"), self._session_factory() as session:
            orm = await self._get_orm(session, user_id)
            if not orm:
                return None
            return self._orm_to_model(orm, await self._get_entries(session, user_id))

    async def ensure_user(self, user_id: str) -> UserChats:
        """Create an empty index document if none exists."""
        async with storage_errors("ensure_user"), self._session_factory() as session:
            orm = await self._get_orm(session, user_id)
            if orm:
                return self._orm_to_model(orm, await self._get_entries(session, user_id))

            now = now_utc()
            orm = UserChatsORM(user_id=user_id, created_at=now, updated_at=now)
            session.add(orm)
            try:
                await session.commit()
            except IntegrityError:
                # Another request created it concurrently for the same user_id.
                await session.rollback()
                orm = await self._require_orm(session, user_id)
                return self._orm_to_model(orm, await self._get_entries(session, user_id))

            await session.refresh(orm)
            return self._orm_to_model(orm, [])

    async def add_entry(
        self,
        user_id: str,
        chat_id: str,
        title: Optional[str] = None,
    ) -> UserChatEntry:
        """Add an entry for a new chat."""
        async with storage_errors("add_entry"), self._session_factory() as session:
            orm = await self._require_orm(session, user_id)

            if not title or not title.strip():
                count = await session.scalar(
                    select(func.count()).select_from(UserChatEntryORM).where(
                        UserChatEntryORM.user_id == user_id
                    )
                )
                title = default_title(count or 0)
            now = now_utc()
            entry = UserChatEntry(
                id=chat_id,
                title=normalize_title(title),
                created_at=now,
                updated_at=now,
            )
            session.add(
                UserChatEntryORM(
                    user_id=user_id,
                    chat_id=chat_id,
                    title=entry.title,
                    created_at=now,
                    updated_at=now,
                )
            )
            orm.updated_at = now

            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateError(f"Chat {chat_id} is already indexed") from e
            return entry

    async def touch_entry(self, user_id: str, chat_id: str) -> UserChatEntry:
        """Refresh the updated_at timestamp of an entry."""
        async with storage_errors("touch_entry"), self._session_factory() as session:
            entry = await self._require_entry(session, user_id, chat_id)
            entry.updated_at = later_than(entry.updated_at)

            await session.commit()
            return self._entry_to_model(entry)

    async def rename_entry(
        self,
        user_id: str,
        chat_id: str,
        new_title: str,
    ) -> UserChatEntry:
        """Change the title of an entry without touching updated_at."""
        title = normalize_title(new_title)
        async with storage_errors("rename_entry"), self._session_factory() as session:
            entry = await self._require_entry(session, user_id, chat_id)
            entry.title = title

            await session.commit()
            return self._entry_to_model(entry)

    async def remove_entry(self, user_id: str, chat_id: str) -> bool:
        """Remove an entry."""
        async with storage_errors("remove_entry"), self._session_factory() as session:
            result = await session.execute(
                delete(UserChatEntryORM).where(
                    and_(UserChatEntryORM.user_id == user_id, UserChatEntryORM.chat_id == chat_id)
                )
            )
            if not result.rowcount:
                return False

            orm = await self._get_orm(session, user_id)
            if orm:
                orm.updated_at = now_utc()
            await session.commit()
            return True
