# pinmap/core/exceptions.py
from __future__ import annotations
import logging
from typing import Any, Iterable

from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger(__name__)


class PinMapError(Exception):
    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(PinMapError):
    """Malformed or missing input. Carries field-level detail."""

    status_code = HTTP_400_BAD_REQUEST
    message = "Validation failed"

    def __init__(self, errors: Iterable[dict[str, Any]] = (), message: str | None = None):
        super().__init__(message)
        self.errors = list(errors)

    @classmethod
    def single(cls, field: str, message: str, location: str = "body") -> "ValidationError":
        return cls([{"field": field, "message": message, "location": location}], message=message)

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, "errors": self.errors}


class InvalidInput(ValidationError):
    message = "Invalid input"


class NotFound(PinMapError):
    status_code = HTTP_404_NOT_FOUND
    message = "Not found"


class ServerError(PinMapError):
    message = "Internal server error"


# An HTTPException so that FastAPI passes it through while reading the body
class BodyTooLarge(HTTPException):
    def __init__(self):
        super().__init__(status_code=HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Request body too large")

    def to_body(self) -> dict[str, Any]:
        return {"error": self.detail}


def _field_path(loc: Iterable[Any]) -> tuple[str, str]:
    parts = [str(p) for p in loc]
    location = parts[0] if parts else "body"
    return location, ".".join(parts[1:]) or location


def flatten_errors(raw: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    out = []
    for err in raw:
        location, field = _field_path(err.get("loc", ()))
        msg = str(err.get("msg", "Invalid value"))
        # pydantic prefixes messages raised from validators
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        out.append({"field": field, "message": msg, "location": location})
    return out


async def pinmap_error_handler(request, exc: PinMapError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def validation_exception_handler(request, exc: RequestValidationError):
    error = ValidationError(flatten_errors(exc.errors()))
    logger.warning(
        "%s %s rejected: %s",
        request.method,
        request.url.path,
        ", ".join(f"{e['field']}: {e['message']}" for e in error.errors),
    )
    return JSONResponse(status_code=error.status_code, content=error.to_body())


async def body_too_large_handler(request, exc: BodyTooLarge):
    logger.warning("%s %s rejected: body too large", request.method, request.url.path)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def database_exception_handler(request, exc: SQLAlchemyError):
    logger.exception("%s %s store error", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=HTTP_500_INTERNAL_SERVER_ERROR, content=ServerError().to_body())


async def unhandled_exception_handler(request, exc: Exception):
    logger.exception("%s %s unhandled error", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=HTTP_500_INTERNAL_SERVER_ERROR, content=ServerError().to_body())


def register_exception_handlers(app) -> None:
    app.add_exception_handler(PinMapError, pinmap_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(BodyTooLarge, body_too_large_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
