"""
Error responses.

Every error leaves the API as ``{"error", "code", "timestamp", "details"?}``
so clients can branch on ``code``.
"""

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hsd_chat.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ChatAppError,
    DuplicateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from hsd_chat.core.logger import setup_logger
from hsd_chat.utils.datetime_utils import now_utc

logger = setup_logger(__name__)

_STATUS_BY_ERROR: list[tuple[type[ChatAppError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(error: ChatAppError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    content: dict[str, Any] = {
        "error": message,
        "code": code,
        "timestamp": now_utc().isoformat(),
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def handle_app_error(request: Request, exc: ChatAppError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(status_code, exc.code, exc.message, details=exc.details)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or None,
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_FAILED",
        "Validation failed",
        details=details,
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_SERVER_ERROR",
        "Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChatAppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
