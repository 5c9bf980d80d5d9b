"""
HSD Chat - Main Application Entry Point

Chat history and per-user chat index service.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hsd_chat import __version__
from hsd_chat.core.config import get_settings
from hsd_chat.core.logger import configure_logging, setup_logger
from hsd_chat.utils.datetime_utils import now_utc

logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info("Starting HSD Chat in %s mode (storage=%s)", settings.ENVIRONMENT, settings.STORAGE_BACKEND)

    if not settings.uses_memory_storage:
        from hsd_chat.infrastructure.local.database import init_db

        await init_db()

    yield

    # Shutdown
    logger.info("Shutting down HSD Chat...")
    if not settings.uses_memory_storage:
        from hsd_chat.infrastructure.local.database import close_db

        await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="HSD Chat",
        description="Chat history and per-user chat index",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from hsd_chat.api.errors import register_exception_handlers

    register_exception_handlers(app)

    # Include routers
    from hsd_chat.api import chats, user_chats

    app.include_router(chats.router, prefix="/api/v1/chats", tags=["chats"])
    app.include_router(user_chats.router, prefix="/api/v1/user-chats", tags=["user_chats"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": __version__,
            "timestamp": now_utc().isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
