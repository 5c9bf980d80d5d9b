"""
Text normalization for message bodies and chat titles.
"""

import re

from hsd_chat.core.exceptions import InvalidTitleError

MAX_TITLE_LENGTH = 100
TITLE_WORDS = 3

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)


def strip_script_tags(text: str) -> str:
    """Remove ``<script>...</script>`` blocks from user supplied text."""
    return _SCRIPT_BLOCK.sub("", text)


def normalize_title(title: str | None, max_length: int = MAX_TITLE_LENGTH) -> str:
    """
    Trim a title and check its length.

    Raises:
        InvalidTitleError: If the trimmed title is empty or longer than max_length
    """
    trimmed = (title or "").strip()
    if not trimmed:
        raise InvalidTitleError("Title is required and cannot be empty")
    if len(trimmed) > max_length:
        raise InvalidTitleError(
            f"Title must be at most {max_length} characters",
            details={"length": len(trimmed), "max_length": max_length},
        )
    return trimmed


def derive_title(text: str, max_length: int = MAX_TITLE_LENGTH) -> str | None:
    """Title taken from the first words of a message, or None if there are none."""
    words = (text or "").split()[:TITLE_WORDS]
    if not words:
        return None
    return " ".join(words)[:max_length].strip() or None


def default_title(existing_count: int) -> str:
    """Fallback title for the next chat of a user holding ``existing_count`` chats."""
    return f"Chat {existing_count + 1}"
