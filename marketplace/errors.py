"""Error taxonomy and the JSON envelope every failure is rendered into."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base class for failures that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class InvalidCredentials(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"


class Unauthorized(MarketplaceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class Forbidden(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid or expired token"


class NotFound(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class RequestAlreadyDecided(Conflict):
    default_message = "Request has already been decided"


class ServerError(MarketplaceError):
    pass


class MailDeliveryError(ServerError):
    default_message = "Failed to send email"


def envelope(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def validation_message(exc: RequestValidationError | ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item not in ("body", "query", "path"))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MarketplaceError)
    async def _marketplace_error(request: Request, exc: MarketplaceError) -> JSONResponse:
        if isinstance(exc, ServerError):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return envelope(exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return envelope(validation_message(exc), status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return envelope(str(exc.detail), exc.status_code)

    @app.exception_handler(SQLAlchemyError)
    async def _database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return envelope("Server error", status.HTTP_500_INTERNAL_SERVER_ERROR)
