"""
Application error taxonomy and FastAPI handlers.
"""
import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for all application-level errors."""
    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, detail: str, context: dict[str, Any] | None = None):
        self.detail = detail
        self.context = context or {}
        super().__init__(detail)


class UpstreamUnavailable(AppError):
    """The upstream repository listing failed or had an unexpected shape."""
    status_code = 502
    error_code = "UPSTREAM_UNAVAILABLE"


class FileParseError(AppError):
    """A single channel file could not be downloaded or parsed."""
    error_code = "FILE_PARSE_ERROR"


class StoreError(AppError):
    """The channel store failed to replace or query records."""
    status_code = 500
    error_code = "STORE_ERROR"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.detail,
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": AppError.error_code,
            "message": str(exc),
        },
    )
