"""
Application configuration using Pydantic Settings.

Storage and auth backends are switched with STORAGE_BACKEND and AUTH_PROVIDER.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["development", "production", "test"] = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./hsd_chat.db"

    # sqlite: SQLAlchemy tables (default)
    # memory: process-local dictionaries, lost on restart
    STORAGE_BACKEND: Literal["sqlite", "memory"] = "sqlite"

    # ===========================================
    # Auth
    # ===========================================
    # mock: bearer token is taken as the user ID
    # jwt: bearer token is a signed JWT, `sub` is the user ID
    AUTH_PROVIDER: Literal["mock", "jwt"] = "mock"

    # PEM public key (RS256) or shared secret (HS256)
    JWT_KEY: str = ""
    JWT_ISSUER: str = ""
    JWT_ALGORITHMS: List[str] = Field(default=["RS256"])

    # ===========================================
    # Chat limits
    # ===========================================
    DEFAULT_PAGE_SIZE: int = 50
    MAX_MESSAGE_LENGTH: int = 10_000

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    ALLOWED_ORIGINS: List[str] = Field(default=["http://localhost:3000"])

    @property
    def uses_memory_storage(self) -> bool:
        """Check if repositories are kept in process memory."""
        return self.STORAGE_BACKEND == "memory"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
