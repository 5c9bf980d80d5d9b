"""
Chat consistency service.

Keeps chat documents and the per-user chat index in step. There is no
cross-collection transaction, so every multi-step operation writes the chat
store first and the index second. An interruption therefore leaves at worst
an extra or stale index entry, or a chat with no entry; a saved message is
never reported lost while the index claims it exists.

Completed steps are not rolled back when a later step fails. A compensating
delete could destroy a message the user already saw as sent.
"""

from datetime import timedelta
from typing import Optional

from hsd_chat.core.exceptions import ChatAppError, NotFoundError, ValidationError
from hsd_chat.core.logger import setup_logger
from hsd_chat.interfaces.chat_repository import IChatRepository
from hsd_chat.interfaces.transaction import ITransactionRunner, PassthroughTransactionRunner
from hsd_chat.interfaces.user_chats_repository import IUserChatsRepository
from hsd_chat.models.chat import Chat, HistoryPage
from hsd_chat.models.enums import MessageRole
from hsd_chat.models.user_chats import IndexAudit, UserChatEntry, UserChats
from hsd_chat.services.pagination import paginate_history, validate_page_args
from hsd_chat.utils.datetime_utils import now_utc
from hsd_chat.utils.text_utils import derive_title, normalize_title

logger = setup_logger(__name__)

USER_CHATS_NOT_FOUND = "USER_CHATS_NOT_FOUND"

# A new chat has no index entry until create_and_append reaches its second step.
EMPTY_CHAT_GRACE = timedelta(minutes=5)


class ChatConsistencyService:
    """Coordinates writes across the chat store and the user chat index."""

    def __init__(
        self,
        chat_repo: IChatRepository,
        user_chats_repo: IUserChatsRepository,
        transactions: Optional[ITransactionRunner] = None,
        default_page_size: int = 50,
    ):
        self._chat_repo = chat_repo
        self._user_chats_repo = user_chats_repo
        self._transactions = transactions or PassthroughTransactionRunner()
        self._default_page_size = default_page_size

    @staticmethod
    def _require_text(text: str) -> str:
        if not text or not text.strip():
            raise ValidationError("text is required")
        return text

    def _log_inconsistency(self, operation: str, user_id: str, chat_id: str, error: object) -> None:
        logger.warning(
            "index_inconsistency operation=%s user=%s chat=%s: %s",
            operation,
            user_id,
            chat_id,
            error,
        )

    # ===========================================
    # Writes
    # ===========================================

    async def create_and_append(
        self,
        user_id: str,
        text: str,
        role: MessageRole = MessageRole.USER,
        title: Optional[str] = None,
    ) -> Chat:
        """
        Start a new chat with its first message.

        Steps: create chat, index it, append the message. If no title is
        given the first words of the message are used.

        Raises:
            ValidationError: If text is empty or title is invalid (nothing written)
            NotFoundError / StorageError: From a failed step; earlier steps stay
        """
        self._require_text(text)
        if title and title.strip():
            entry_title = normalize_title(title)
        else:
            entry_title = derive_title(text)

        async def operation() -> Chat:
            chat = await self._chat_repo.create_chat(user_id)
            try:
                await self._user_chats_repo.ensure_user(user_id)
                await self._user_chats_repo.add_entry(user_id, chat.id, entry_title)
            except ChatAppError as e:
                self._log_inconsistency("create.index", user_id, chat.id, e)
                raise
            try:
                saved = await self._chat_repo.append_message(chat.id, user_id, role, text)
            except ChatAppError as e:
                self._log_inconsistency("create.append", user_id, chat.id, e)
                raise
            logger.info("Chat message saved for user: %s, chat: %s (new)", user_id, saved.id)
            return saved

        return await self._transactions.run(operation)

    async def append_to_existing(
        self,
        chat_id: str,
        user_id: str,
        text: str,
        role: MessageRole = MessageRole.USER,
    ) -> Chat:
        """
        Append a message to an existing chat and refresh its index entry.

        The index refresh is best-effort: if it fails the message stays saved
        and the inconsistency is logged, not raised.

        Raises:
            NotFoundError: If the chat does not exist for user_id (index untouched)
        """
        self._require_text(text)

        async def operation() -> Chat:
            saved = await self._chat_repo.append_message(chat_id, user_id, role, text)
            try:
                await self._user_chats_repo.touch_entry(user_id, chat_id)
            except ChatAppError as e:
                self._log_inconsistency("append.touch", user_id, chat_id, e)
            logger.info("Chat message saved for user: %s, chat: %s", user_id, chat_id)
            return saved

        return await self._transactions.run(operation)

    async def post_message(
        self,
        user_id: str,
        text: str,
        role: MessageRole = MessageRole.USER,
        chat_id: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Chat:
        """Append to chat_id when given, otherwise start a new chat."""
        if chat_id:
            return await self.append_to_existing(chat_id, user_id, text, role)
        return await self.create_and_append(user_id, text, role, title)

    async def rename_chat(self, user_id: str, chat_id: str, new_title: str) -> UserChatEntry:
        """Rename a chat. The title lives only in the index."""
        return await self._user_chats_repo.rename_entry(user_id, chat_id, new_title)

    async def delete_chat(self, user_id: str, chat_id: str) -> None:
        """
        Delete a chat and its index entry.

        Raises:
            NotFoundError: If the chat is already gone (index left untouched),
                or if the index had no entry after the chat was deleted
        """

        async def operation() -> None:
            deleted = await self._chat_repo.delete_chat(chat_id, user_id)
            if not deleted:
                raise NotFoundError("Chat not found in chat collection")

            removed = await self._user_chats_repo.remove_entry(user_id, chat_id)
            if not removed:
                self._log_inconsistency("delete.remove", user_id, chat_id, "no index entry")
                raise NotFoundError("Chat not found in user chats")
            logger.info("Chat deleted for user: %s, chat: %s", user_id, chat_id)

        await self._transactions.run(operation)

    # ===========================================
    # Reads
    # ===========================================

    async def get_history_page(
        self,
        chat_id: str,
        user_id: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> HistoryPage:
        """
        Get one page of a chat history, newest page first.

        Raises:
            InvalidArgumentError: If page or page_size is below 1
            NotFoundError: If the chat does not exist for user_id
        """
        page_size = page_size if page_size is not None else self._default_page_size
        validate_page_args(page, page_size)

        chat = await self._chat_repo.get(chat_id, user_id)
        if not chat:
            raise NotFoundError("No chat history found")

        messages, pagination = paginate_history(chat.history, page, page_size)
        return HistoryPage(
            chat=chat.model_copy(update={"history": messages}),
            pagination=pagination,
        )

    async def get_user_chats(self, user_id: str) -> UserChats:
        """
        Get a user's chat index, most recently updated first.

        Raises:
            NotFoundError: If the user has no index yet
        """
        user_chats = await self._user_chats_repo.get(user_id)
        if not user_chats:
            raise NotFoundError("No chats found for user", code=USER_CHATS_NOT_FOUND)
        user_chats.chats.sort(key=lambda entry: entry.updated_at, reverse=True)
        return user_chats

    # ===========================================
    # Audit / repair
    # ===========================================

    async def audit_user(self, user_id: str) -> IndexAudit:
        """Compare a user's chats with their index without changing anything."""
        chats = await self._chat_repo.list_by_user(user_id)
        user_chats = await self._user_chats_repo.get(user_id)

        chat_ids = [chat.id for chat in chats]
        entry_ids = [entry.id for entry in user_chats.chats] if user_chats else []
        indexed = set(entry_ids)
        stored = set(chat_ids)

        return IndexAudit(
            user_id=user_id,
            orphan_chat_ids=[cid for cid in chat_ids if cid not in indexed],
            dangling_entry_ids=[eid for eid in entry_ids if eid not in stored],
        )

    async def repair_user(
        self,
        user_id: str,
        empty_chat_grace: timedelta = EMPTY_CHAT_GRACE,
    ) -> IndexAudit:
        """
        Bring a user's index back in line with their chats.

        Dangling entries are removed. Orphan chats with an empty history are
        deleted once they are older than ``empty_chat_grace``; younger ones may
        belong to a create still in progress and are left alone. Orphan chats
        holding messages are re-indexed, never deleted.
        """
        audit = await self.audit_user(user_id)
        if audit.is_consistent:
            return audit

        for entry_id in audit.dangling_entry_ids:
            if await self._user_chats_repo.remove_entry(user_id, entry_id):
                audit.removed_entry_ids.append(entry_id)

        if audit.orphan_chat_ids:
            chats = {chat.id: chat for chat in await self._chat_repo.list_by_user(user_id)}
            await self._user_chats_repo.ensure_user(user_id)
            for chat_id in audit.orphan_chat_ids:
                chat = chats.get(chat_id)
                if chat is None:
                    continue
                if not chat.history:
                    if chat.created_at > now_utc() - empty_chat_grace:
                        continue
                    if await self._chat_repo.delete_chat(chat_id, user_id):
                        audit.deleted_chat_ids.append(chat_id)
                else:
                    await self._user_chats_repo.add_entry(user_id, chat_id)
                    audit.reindexed_chat_ids.append(chat_id)

        logger.info(
            "Repaired chat index for user: %s (removed=%d deleted=%d reindexed=%d)",
            user_id,
            len(audit.removed_entry_ids),
            len(audit.deleted_chat_ids),
            len(audit.reindexed_chat_ids),
        )
        return audit
