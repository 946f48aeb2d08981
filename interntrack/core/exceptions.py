"""Exception taxonomy for the InternTrack API and the handlers that render it."""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class InternTrackAPIException(HTTPException):
    """Base exception for the InternTrack API."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: Optional[Dict[str, str]] = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.extra = extra or {}


class NotFoundError(InternTrackAPIException):
    """Missing intern, repository or stored resource."""

    def __init__(self, detail: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND",
            extra=extra
        )


class UnauthorizedError(InternTrackAPIException):
    """Rejected credential, including the configured GitHub token."""

    def __init__(self, detail: str = "Invalid credentials", extra: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="UNAUTHORIZED",
            extra=extra
        )


class ConflictError(InternTrackAPIException):
    """Duplicate unique key on insert."""

    def __init__(self, detail: str = "Resource already exists", extra: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT",
            extra=extra
        )


class InternalError(InternTrackAPIException):
    """Unclassified failure, including unexpected external API responses."""

    def __init__(self, detail: str = "Internal server error", extra: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="INTERNAL_ERROR",
            extra=extra
        )


async def interntrack_exception_handler(request: Request, exc: InternTrackAPIException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.method} {request.url.path}: {exc.detail} {exc.extra}")
        detail = "Internal server error"
    else:
        detail = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": detail, "error_code": exc.error_code},
        headers=exc.headers,
    )


async def integrity_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Resource already exists", "error_code": "CONFLICT"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error_code": "INTERNAL_ERROR"},
    )
