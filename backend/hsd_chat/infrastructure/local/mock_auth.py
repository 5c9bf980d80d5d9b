"""
Mock authentication provider for local development.
"""

from hsd_chat.core.exceptions import AuthenticationError
from hsd_chat.interfaces.auth_provider import IAuthProvider, User


class MockAuthProvider(IAuthProvider):
    """Mock auth provider: the bearer token is the user ID."""

    def __init__(self, enabled: bool = True):
        """
        Initialize mock auth provider.

        Args:
            enabled: Whether a bearer token is required
        """
        self._enabled = enabled

    async def verify_token(self, token: str) -> User:
        """
        Verify token - in mock mode, token is treated as user_id.

        Args:
            token: User ID (in mock mode)

        Returns:
            Mock user
        """
        user_id = (token or "").strip()
        if not user_id:
            raise AuthenticationError("Invalid or expired token")
        if "@" in user_id:
            return User(id=user_id, email=user_id)
        return User(id=user_id, email=f"{user_id}@example.com")

    def is_enabled(self) -> bool:
        """Check if authentication is enabled."""
        return self._enabled
