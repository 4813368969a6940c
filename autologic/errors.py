"""
Application error taxonomy and the single place errors become HTTP responses.

Services raise these like any HTTPException; the handlers registered here turn
them (and FastAPI's own validation errors) into the response envelope
``{"status": "error", "message": ..., "errors": [...]}``.
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    """Base class for errors with a stable status code and user-facing message"""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[list[dict]] = None,
        headers: Optional[dict] = None,
    ):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(status_code=self.status_code, detail=self.message, headers=headers)


class ValidationFailed(AppError):
    status_code = 400
    default_message = "Validation Error"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Not authorized"


class Forbidden(AppError):
    status_code = 403
    default_message = "Access denied"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    # Conflicts share 400 with validation failures; clients key off the message
    status_code = 400
    default_message = "Resource already exists"


class TooManyRequests(AppError):
    status_code = 429
    default_message = "Too many requests from this IP, please try again later."

    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message, headers={"Retry-After": str(retry_after)})


def error_body(message: str, errors: Optional[list] = None) -> dict:
    body = {"status": "error", "message": message}
    if errors:
        body["errors"] = errors
    return body


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.errors),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("message") or str(detail)
    else:
        message = str(detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Field validation failures become 400 with one entry per field, except a
    malformed Authorization header which is an authentication failure.
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(status_code=401, content=error_body("Not authorized, no token"))

    errors = [
        {
            "field": _field_name(error.get("loc", ())),
            "message": str(error.get("msg", "Invalid value")).removeprefix("Value error, "),
        }
        for error in exc.errors()
    ]
    logger.warning(f"Validation error for {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content=error_body("Validation Error", errors))


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} - Unhandled error: {exc}")
    return JSONResponse(status_code=500, content=error_body("Internal Server Error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
