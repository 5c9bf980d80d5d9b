"""
Reverse-chronological pagination over a chat history.

Page 1 holds the newest messages so a client can render the end of a
conversation first and fetch older pages on demand. Each page is returned in
chronological order.
"""

import math
from typing import Sequence, TypeVar

from hsd_chat.core.exceptions import InvalidArgumentError
from hsd_chat.models.chat import Pagination

T = TypeVar("T")


def validate_page_args(page: int, page_size: int) -> None:
    """Raise InvalidArgumentError unless both page and page_size are at least 1."""
    if page < 1:
        raise InvalidArgumentError("page must be >= 1", details={"page": page})
    if page_size < 1:
        raise InvalidArgumentError("page_size must be >= 1", details={"page_size": page_size})


def paginate_history(history: Sequence[T], page: int, page_size: int) -> tuple[list[T], Pagination]:
    """
    Slice one page out of a history.

    Args:
        history: Full history, oldest first
        page: 1-based page number, counted from the newest message
        page_size: Messages per page

    Returns:
        (page messages oldest first, pagination info)

    Raises:
        InvalidArgumentError: If page or page_size is below 1
    """
    validate_page_args(page, page_size)

    total_messages = len(history)
    total_pages = math.ceil(total_messages / page_size)
    skip = (page - 1) * page_size

    newest_first = list(reversed(history))
    page_items = newest_first[skip:skip + page_size]
    page_items.reverse()

    return page_items, Pagination(
        current_page=page,
        total_pages=total_pages,
        total_messages=total_messages,
        has_more=page < total_pages,
        has_previous=page > 1,
    )
