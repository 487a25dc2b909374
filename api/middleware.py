"""
Global middleware and error translation.

Every failure leaves the API as ``{"status": ..., "message": ...}``:
  • ``AppError`` subclasses keep their own status code and message
  • request body validation failures become 400
  • unknown routes become 404 "Route not found"
  • anything else becomes a generic 500, logged with its traceback

Tracebacks are added to the body (``stack``) only in development mode.
"""

from __future__ import annotations

import logging
import time
import traceback
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.errors import AppError, UnauthorizedError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred"
ROUTE_NOT_FOUND_MESSAGE = "Route not found"


def _format_stack(exc: BaseException) -> list[str]:
    return traceback.format_exception(type(exc), exc, exc.__traceback__)


def _error_body(status_code: int, message: str) -> Dict[str, Any]:
    return {"status": "fail" if status_code < 500 else "error", "message": message}


def register_middleware(app: FastAPI, *, expose_stack_traces: bool = False) -> None:
    """Attach app-level middleware."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            body = _error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)
            if expose_stack_traces:
                body["stack"] = _format_stack(exc)
            response = JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug(
            "%s %s -> %d (%.3fs)", request.method, request.url.path, response.status_code, elapsed
        )
        return response


def register_error_handlers(app: FastAPI, *, expose_stack_traces: bool = False) -> None:
    """Translate raised errors into JSON responses in one place."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "%s on %s %s: %s %s",
                exc.error_code, request.method, request.url.path, exc.message, exc.details,
            )
        else:
            logger.info(
                "%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message
            )

        body = exc.to_dict()
        if expose_stack_traces:
            body["stack"] = _format_stack(exc)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
        return JSONResponse(status_code=exc.status_code, content=body, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"Invalid request: {location + ': ' if location else ''}{first.get('msg', 'invalid input')}"
        else:
            message = "Invalid request"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(status.HTTP_400_BAD_REQUEST, message),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message = ROUTE_NOT_FOUND_MESSAGE
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, message),
            headers=getattr(exc, "headers", None),
        )
