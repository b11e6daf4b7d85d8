"""
Error hierarchy for the expense tracker API.

Every error the service raises on purpose derives from ExpenseTrackerError and
carries the HTTP status it maps to. `register_exception_handlers` turns them
into the `{"message": ...}` JSON bodies the client displays verbatim.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


class ExpenseTrackerError(Exception):
    """Base class for all expected API errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ValidationError(ExpenseTrackerError):
    """Missing or invalid request field."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ExpenseTrackerError):
    """A record with the same natural key already exists."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ExpenseTrackerError):
    """Unknown id, or an id owned by another user."""

    status_code = status.HTTP_404_NOT_FOUND


class StorageError(ExpenseTrackerError):
    """Unexpected persistence failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def _request_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "invalid value")
    return f"{location}: {msg}" if location else msg


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ExpenseTrackerError)
    async def handle_app_error(request: Request, exc: ExpenseTrackerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": _request_validation_message(exc)},
        )
