"""
Notes Service — Error Normalizer
================================

What:  Maps every failure raised while serving /api requests to the
       `{success: false, message, errors?}` envelope with a stable status code.
How:   `normalize_exception()` is a pure function applying the mapping policy;
       FastAPI exception handlers registered by `register_exception_handlers()`
       check the request path and render its result through `envelope()`.
Who:   Registered once by main.create_app().

Mapping Policy (ordered, first match wins):
    1. Validation failure (ValidationError, RequestValidationError)
       → 422 "Validation failed" + errors map
    2. Not found (NotFoundError, unmatched route, non-integer id in path)
       → 404 "Resource not found", no errors key
    3. Anything with a status code (NotesServiceError, Starlette HTTPException)
       → that code and the exception's own message; plain exceptions → 500.
       A 500 outside debug mode always reads "Internal server error".

Requests outside the /api prefix get FastAPI/Starlette default behaviour.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import (
    http_exception_handler,
    request_validation_exception_handler,
)
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from notes_service.config import settings
from notes_service.exceptions import NotesServiceError, NotFoundError, ValidationError
from notes_service.middleware.request_id import REQUEST_ID_HEADER, request_id_var
from notes_service.responses import envelope
from notes_service.schemas.note import collect_field_errors

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

VALIDATION_MESSAGE = "Validation failed"
NOT_FOUND_MESSAGE = "Resource not found"
GENERIC_MESSAGE = "An error occurred"
INTERNAL_ERROR_MESSAGE = "Internal server error"


@dataclass(frozen=True)
class NormalizedError:
    """The status and envelope fields a failure maps to."""

    status_code: int
    message: str
    errors: Optional[Dict[str, List[str]]] = None


def is_api_request(request: Request) -> bool:
    path = request.url.path
    return path == API_PREFIX or path.startswith(API_PREFIX + "/")


def _is_path_only(exc: RequestValidationError) -> bool:
    errors = exc.errors()
    return bool(errors) and all(err.get("loc", ("",))[0] == "path" for err in errors)


def normalize_exception(exc: Exception, debug: bool = False) -> NormalizedError:
    """
    Apply the mapping policy to one exception.

    Args:
        exc:   The failure raised while handling an /api request
        debug: When False, 500 messages are replaced with a generic one
    """
    # ── 1. Validation ─────────────────────────────────────────────────────
    if isinstance(exc, ValidationError):
        return NormalizedError(422, VALIDATION_MESSAGE, exc.errors)
    if isinstance(exc, RequestValidationError):
        # /api/notes/abc can never match a note id
        if _is_path_only(exc):
            return NormalizedError(404, NOT_FOUND_MESSAGE)
        return NormalizedError(422, VALIDATION_MESSAGE, collect_field_errors(exc.errors()))

    # ── 2. Not found ──────────────────────────────────────────────────────
    if isinstance(exc, NotFoundError):
        return NormalizedError(404, NOT_FOUND_MESSAGE)
    if isinstance(exc, StarletteHTTPException) and exc.status_code == 404:
        return NormalizedError(404, NOT_FOUND_MESSAGE)

    # ── 3. Explicit status, else 500 ──────────────────────────────────────
    if isinstance(exc, StarletteHTTPException):
        status_code, message = exc.status_code, str(exc.detail or "")
    elif isinstance(exc, NotesServiceError):
        status_code, message = exc.status_code, exc.message
    else:
        status_code = getattr(exc, "status_code", None) or 500
        message = str(exc)

    if status_code == 500 and not debug:
        message = INTERNAL_ERROR_MESSAGE
    return NormalizedError(status_code, message or GENERIC_MESSAGE)


def _request_id(request: Request) -> str:
    """
    Correlation id of the failing request.

    The catch-all handler runs outside RequestIDMiddleware, after the
    ContextVar has been reset, so fall back to request.state and the header.
    """
    return (
        request_id_var.get("")
        or getattr(request.state, "request_id", "")
        or request.headers.get(REQUEST_ID_HEADER, "")
    )


def _response_headers(request: Request, exc: Exception) -> Dict[str, str]:
    headers = dict(getattr(exc, "headers", None) or {})
    rid = _request_id(request)
    if rid:
        headers[REQUEST_ID_HEADER] = rid
    return headers


def _render(request: Request, exc: Exception) -> Response:
    result = normalize_exception(exc, debug=settings.debug)
    rid = _request_id(request)

    if result.status_code >= 500:
        logger.error(
            "[%s] %s %s failed: %s",
            rid,
            request.method,
            request.url.path,
            str(exc),
            exc_info=exc,
        )
    else:
        logger.warning(
            "[%s] %s %s → %d %s",
            rid,
            request.method,
            request.url.path,
            result.status_code,
            result.message,
        )

    return envelope(
        success=False,
        status_code=result.status_code,
        message=result.message,
        errors=result.errors,
        headers=_response_headers(request, exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the normalizer on the application.

    Handler order does not matter: Starlette picks the most specific class
    in the exception's MRO.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        if not is_api_request(request):
            return await request_validation_exception_handler(request, exc)
        return _render(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if not is_api_request(request):
            return await http_exception_handler(request, exc)
        return _render(request, exc)

    @app.exception_handler(NotesServiceError)
    async def handle_service_error(request: Request, exc: NotesServiceError):
        # Service errors are only raised by /api routes
        return _render(request, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        if not is_api_request(request):
            logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
            return PlainTextResponse(
                "Internal Server Error",
                status_code=500,
                headers=_response_headers(request, exc),
            )
        return _render(request, exc)
