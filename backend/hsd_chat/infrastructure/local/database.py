"""
SQLite database configuration and ORM models.

Every chat message and every user chat index entry is its own row, so each
append, touch, rename or removal is a single-row INSERT, UPDATE or DELETE.
Concurrent writers to the same chat or the same index never overwrite each
other's rows.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from hsd_chat.core.config import get_settings
from hsd_chat.core.exceptions import StorageError
from hsd_chat.utils.datetime_utils import now_utc


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class ChatORM(Base):
    """Chat ORM model. Messages live in ``chat_messages``."""

    __tablename__ = "chats"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, index=True)
    updated_at = Column(DateTime(timezone=True), default=now_utc, index=True)


class ChatMessageORM(Base):
    """
    Chat message ORM model.

    ``seq`` is assigned on insert while SQLite holds the write lock, so it
    defines history order.
    ``parts`` is a list of {text}.
    """

    __tablename__ = "chat_messages"

    seq = Column(Integer, primary_key=True, autoincrement=True)
    chat_id = Column(String(36), ForeignKey("chats.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    parts = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)


class UserChatsORM(Base):
    """User chat index ORM model. Entries live in ``user_chat_entries``."""

    __tablename__ = "userchats"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(255), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc)


class UserChatEntryORM(Base):
    """One chat in a user's index. ``chat_id`` is unique per user."""

    __tablename__ = "user_chat_entries"
    __table_args__ = (UniqueConstraint("user_id", "chat_id", name="uq_user_chat_entry"),)

    seq = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), ForeignKey("userchats.user_id"), nullable=False, index=True)
    chat_id = Column(String(36), nullable=False)
    title = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


# ===========================================
# Database Session Management
# ===========================================

_engine: Optional[AsyncEngine] = None


def get_engine() -> AsyncEngine:
    """Get the shared async engine, creating it on first use."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(settings.DATABASE_URL, echo=False)
    return _engine


def get_session_factory(engine: Optional[AsyncEngine] = None) -> async_sessionmaker[AsyncSession]:
    """Get async session factory."""
    return async_sessionmaker(engine or get_engine(), class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the shared engine (application shutdown)."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


@asynccontextmanager
async def storage_errors(operation: str) -> AsyncIterator[None]:
    """Translate SQLAlchemy failures into StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        raise StorageError(f"{operation} failed: {e}", details={"operation": operation}) from e
