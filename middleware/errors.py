"""
Exception handlers shared by every route

Each handler turns an exception into the standard response envelope. Domain
errors (AppError) keep their message when they are operational; anything
unexpected becomes a generic 500 and is logged with its traceback.
"""
import logging
import re
import traceback
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings
from schemas import envelope
from utils.errors import AppError, ConflictError, InternalError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something went wrong!"

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"

_PG_KEY_RE = re.compile(r"\(([^)]+)\)=")
_SQLITE_COLUMN_RE = re.compile(r"constraint failed: \w+\.(\w+)")


def _sqlstate(orig) -> str:
    # psycopg2 exposes pgcode, psycopg 3 sqlstate
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None) or ""


def translate_integrity_error(exc: IntegrityError) -> AppError:
    """
    Map a database constraint violation onto a domain error

    Args:
        exc: The IntegrityError raised by SQLAlchemy

    Returns:
        ConflictError for unique violations, ValidationError for foreign key
        and not-null violations, InternalError otherwise
    """
    orig = exc.orig
    code = _sqlstate(orig)
    text = str(orig)

    if code == UNIQUE_VIOLATION or "UNIQUE constraint failed" in text:
        detail = getattr(getattr(orig, "diag", None), "message_detail", None) or text
        match = _PG_KEY_RE.search(detail) or _SQLITE_COLUMN_RE.search(text)
        field = match.group(1) if match else "field"
        return ConflictError(f"{field.capitalize()} already exists")

    if code == FOREIGN_KEY_VIOLATION or "FOREIGN KEY constraint failed" in text:
        return ValidationError("Invalid reference: related record does not exist")

    if code == NOT_NULL_VIOLATION or "NOT NULL constraint failed" in text:
        column = getattr(getattr(orig, "diag", None), "column_name", None)
        match = _SQLITE_COLUMN_RE.search(text)
        field = column or (match.group(1) if match else "field")
        return ValidationError(f"{field} is required")

    return InternalError("Database error occurred")


def _error_response(
    request: Request, err: AppError, cause: Optional[Exception] = None
) -> JSONResponse:
    settings = get_settings()

    if err.is_operational:
        body = envelope(err.status, message=err.message)
        status_code = err.status_code
    else:
        logger.error(
            "Unhandled error on %s %s: %s",
            request.method,
            request.url.path,
            err.message,
            exc_info=cause or err,
        )
        body = envelope("error", message=GENERIC_MESSAGE)
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if settings.is_development:
        source = cause or err
        body["error"] = repr(source)
        body["stack"] = "".join(
            traceback.format_exception(type(source), source, source.__traceback__)
        )

    return JSONResponse(status_code=status_code, content=body)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(request, exc)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    return _error_response(request, translate_integrity_error(exc), cause=exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        detail = "Malformed request"
    return _error_response(request, ValidationError(f"Invalid request: {detail}"))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Can't find {request.url.path} on this server!"
    else:
        message = str(exc.detail)

    status_label = "fail" if exc.status_code < 500 else "error"
    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(status_label, message=message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(request, InternalError(str(exc) or type(exc).__name__), cause=exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
