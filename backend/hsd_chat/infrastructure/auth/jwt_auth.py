"""
JWT authentication provider.

Verifies session tokens issued by an external identity service against a
configured key. The token subject becomes the user ID.
"""

from __future__ import annotations

from typing import Any

from jose import JWTError, jwt

from hsd_chat.core.config import Settings
from hsd_chat.core.exceptions import AuthenticationError
from hsd_chat.interfaces.auth_provider import IAuthProvider, User


class JwtAuthProvider(IAuthProvider):
    """Auth provider with static-key JWT validation."""

    def __init__(self, settings: Settings):
        if not settings.JWT_KEY:
            raise ValueError("JWT_KEY must be set for jwt auth")
        self._settings = settings

    def _decode_token(self, token: str) -> dict[str, Any]:
        options = {
            "verify_aud": False,
            "verify_iss": bool(self._settings.JWT_ISSUER),
        }
        return jwt.decode(
            token,
            self._settings.JWT_KEY,
            algorithms=self._settings.JWT_ALGORITHMS,
            issuer=self._settings.JWT_ISSUER or None,
            options=options,
        )

    async def verify_token(self, token: str) -> User:
        try:
            claims = self._decode_token(token)
        except JWTError as e:
            raise AuthenticationError("Invalid or expired token") from e

        subject = claims.get("sub")
        if not subject:
            raise AuthenticationError("Invalid or expired token", details="missing subject")

        return User(
            id=str(subject),
            email=claims.get("email"),
            first_name=claims.get("first_name"),
            last_name=claims.get("last_name"),
        )

    def is_enabled(self) -> bool:
        return True
