"""Relay error taxonomy and the handlers that render it as a JSON envelope."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

__all__ = [
    "BadRequest",
    "EmptyAnalysis",
    "ProviderFailure",
    "RelayError",
    "error_envelope",
    "install_error_handlers",
]

logger = logging.getLogger(__name__)


class RelayError(Exception):
    """Base for failures a relay handler reports to its caller."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BadRequest(RelayError):
    status_code = 400


class ProviderFailure(RelayError):
    """The downstream AI provider failed, was unreachable or answered nonsense."""

    status_code = 500


class EmptyAnalysis(ProviderFailure):
    def __init__(self, message: str = "No analysis returned from API") -> None:
        super().__init__(message)


def error_envelope(message: str, status_code: int, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


async def _relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_envelope(exc.message, exc.status_code)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
    return error_envelope(message, exc.status_code, getattr(exc, "headers", None))


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request body"
    return error_envelope(message, 400)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return error_envelope(str(exc) or "Internal server error", 500)


def install_error_handlers(application: FastAPI) -> None:
    """Render every failure as ``{"success": false, "error": ...}``."""
    application.add_exception_handler(RelayError, _relay_error_handler)  # type: ignore[arg-type]
    application.add_exception_handler(StarletteHTTPException, _http_error_handler)  # type: ignore[arg-type]
    application.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    application.add_exception_handler(Exception, _unhandled_error_handler)
