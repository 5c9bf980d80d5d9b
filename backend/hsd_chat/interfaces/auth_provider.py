"""
Authentication provider interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Authenticated user resolved from a bearer token."""

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class IAuthProvider(ABC):
    """Abstract interface for token verification."""

    @abstractmethod
    async def verify_token(self, token: str) -> User:
        """
        Verify a bearer token.

        Raises:
            AuthenticationError: If the token is invalid or expired
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Check if authentication is enforced."""
        pass
