"""
Enum definitions for the application.
"""

from enum import Enum


class MessageRole(str, Enum):
    """Author of a chat message. Closed set: no other roles are stored."""

    USER = "user"
    MODEL = "model"
