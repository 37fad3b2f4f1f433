"""Map service exceptions to JSON error responses."""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import (
    AuthorizationException,
    CafeBotException,
    ConcurrentModificationException,
    DuplicateSubmissionException,
    ExternalCallException,
    InvalidStateException,
    NotFoundException,
    UnsupportedCompanyException,
    ValidationException,
)
from app.core.sentry_integration import capture_exception
from logging_config import logger

# Checked in order; subclasses come before their bases
STATUS_BY_EXCEPTION: tuple[tuple[type[CafeBotException], int], ...] = (
    (ValidationException, 400),
    (AuthorizationException, 401),
    (NotFoundException, 404),
    (UnsupportedCompanyException, 400),
    (InvalidStateException, 400),
    (ExternalCallException, 400),
    (DuplicateSubmissionException, 409),
    (ConcurrentModificationException, 409),
)


def status_for(exc: CafeBotException) -> int:
    for exc_type, status in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status
    return 500


def error_body(exc: CafeBotException) -> dict:
    body: dict = {"success": False, "error": exc.message}
    if isinstance(exc, ValidationException) and exc.required:
        body["required"] = exc.required
    return body


async def cafebot_exception_handler(request: Request, exc: CafeBotException) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"❌ {request.method} {request.url.path} failed: {exc.message}")
        capture_exception(exc, path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "details": exc.message},
        )
    return JSONResponse(status_code=status, content=error_body(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    required = [
        str(error["loc"][-1]) for error in exc.errors() if error.get("type") == "missing"
    ]
    if required:
        return JSONResponse(
            status_code=400, content={"error": "Missing required fields", "required": required}
        )
    first = exc.errors()[0] if exc.errors() else {}
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": f"Invalid request: {first.get('msg', 'bad input')}"},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content={"error": "Method not allowed"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    capture_exception(exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "details": str(exc)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CafeBotException, cafebot_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
