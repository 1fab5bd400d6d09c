# appointly/core/exceptions.py
"""
Domain exceptions for the scheduling backend.

Services raise these; the HTTP layer maps them to status codes in
register_error_handlers. No retries happen anywhere in the core, so every
exception here is terminal for the request that raised it.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
            self,
            message: str,
            code: Optional[str] = None,
            details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code,
            "details": jsonable_encoder(self.details),
        }


class ValidationError(DomainException):
    """Missing or malformed input. Caller's fault, never retried."""

    status_code = status.HTTP_400_BAD_REQUEST


class AccessDeniedError(DomainException):
    """Attempt to touch another business's data."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(DomainException):
    """Referenced staff, service, event type or appointment does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class SlotUnavailableError(DomainException):
    """Proposed booking overlaps an existing (buffered) appointment."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(
            self,
            message: str = "Time slot is not available",
            code: Optional[str] = None,
            details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class UnknownError(DomainException):
    """Unexpected failure; logged with traceback and surfaced generically."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def register_error_handlers(app: FastAPI) -> None:
    """Map domain exceptions and request validation failures to JSON responses"""

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        else:
            logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
            request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            {
                "error": "Validation error",
                "code": "ValidationError",
                "details": jsonable_encoder(exc.errors()),
            },
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            {"error": "Internal server error", "code": "UnknownError", "details": {}},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
