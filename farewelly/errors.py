"""
API error type and the exception handlers that turn errors into the
``{"success": false, "error": ...}`` envelope.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Request failure carrying the HTTP status code to answer with"""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def error_response(message: str, status_code: int, headers: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


def _field_name(loc) -> str:
    # loc looks like ("body", "service_type") or ("query", "page")
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "form", "header")]
    return ".".join(parts) or "request"


def format_validation_errors(errors: list) -> str:
    missing = [_field_name(e.get("loc", ())) for e in errors if e.get("type") == "missing"]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    first = errors[0] if errors else {}
    message = str(first.get("msg", "Invalid request"))
    # Value errors raised by our validators come prefixed by pydantic
    message = message.removeprefix("Value error, ")
    field = _field_name(first.get("loc", ()))
    if first.get("type") == "value_error":
        return message
    return f"Invalid {field}: {message}"


async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} - {exc.message}")
    else:
        logger.warning(f"⚠️ {request.method} {request.url.path} - {exc.status_code}: {exc.message}")
    return error_response(exc.message, exc.status_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("message") or str(detail)
    else:
        message = str(detail)
    return error_response(message, exc.status_code, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = format_validation_errors(exc.errors())
    logger.warning(f"Validation error for {request.url.path}: {message}")
    return error_response(message, 400)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response("Internal server error", 500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
