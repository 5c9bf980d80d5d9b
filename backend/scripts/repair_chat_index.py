"""
Audit and repair user chat indexes.

Finds chats with no index entry and index entries with no chat, left behind
when a multi-step chat operation was interrupted.

Empty orphan chats younger than the grace period are skipped, since a create
may still be indexing them.

Usage:
    cd backend
    python -m scripts.repair_chat_index                 # Dry-run, all users
    python -m scripts.repair_chat_index --user u1       # Dry-run, one user
    python -m scripts.repair_chat_index --apply         # Actually repair

Requires: STORAGE_BACKEND=sqlite (DATABASE_URL in .env)
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import timedelta
from pathlib import Path

# Suppress noisy SQLAlchemy logs
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

# Ensure backend root is on sys.path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from sqlalchemy import select

from hsd_chat.infrastructure.local.chat_repository import SqliteChatRepository
from hsd_chat.infrastructure.local.database import (
    ChatORM,
    UserChatsORM,
    close_db,
    get_session_factory,
    init_db,
)
from hsd_chat.infrastructure.local.user_chats_repository import SqliteUserChatsRepository
from hsd_chat.services.chat_consistency_service import ChatConsistencyService


async def list_user_ids(session_factory) -> list[str]:
    async with session_factory() as session:
        chat_users = await session.execute(select(ChatORM.user_id).distinct())
        index_users = await session.execute(select(UserChatsORM.user_id).distinct())
        return sorted(set(chat_users.scalars().all()) | set(index_users.scalars().all()))


async def repair(user_ids: list[str], dry_run: bool, grace: timedelta) -> int:
    """Audit (and optionally repair) the given users. Returns inconsistent user count."""
    await init_db()
    session_factory = get_session_factory()
    service = ChatConsistencyService(
        chat_repo=SqliteChatRepository(session_factory=session_factory),
        user_chats_repo=SqliteUserChatsRepository(session_factory=session_factory),
    )

    try:
        if not user_ids:
            user_ids = await list_user_ids(session_factory)

        inconsistent = 0
        for user_id in user_ids:
            audit = await service.audit_user(user_id)
            if audit.is_consistent:
                continue
            inconsistent += 1
            print(
                f"[{user_id}] orphan chats: {audit.orphan_chat_ids} "
                f"dangling entries: {audit.dangling_entry_ids}"
            )
            if dry_run:
                continue
            result = await service.repair_user(user_id, empty_chat_grace=grace)
            print(
                f"[{user_id}] removed entries: {result.removed_entry_ids} "
                f"deleted empty chats: {result.deleted_chat_ids} "
                f"re-indexed chats: {result.reindexed_chat_ids}"
            )
    finally:
        await close_db()

    mode = "DRY-RUN" if dry_run else "APPLIED"
    print(f"[{mode}] {inconsistent} of {len(user_ids)} users had index inconsistencies.")
    return inconsistent


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Audit and repair user chat indexes",
    )
    parser.add_argument(
        "--user",
        action="append",
        default=[],
        help="User ID to check (repeatable). Defaults to every user.",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Repair inconsistencies (default is dry-run)",
    )
    parser.add_argument(
        "--grace-minutes",
        type=float,
        default=5,
        help="Leave empty orphan chats younger than this alone (default: 5)",
    )
    args = parser.parse_args()
    asyncio.run(
        repair(args.user, dry_run=not args.apply, grace=timedelta(minutes=args.grace_minutes))
    )


if __name__ == "__main__":
    main()
