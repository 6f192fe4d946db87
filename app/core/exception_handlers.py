"""Exception handlers translating errors into the contact API error body.

Every error response, whatever raised it, has the same JSON shape::

    {"error": "...", "code": "...", "request_id": "...",
     "retryAfter": 12,        # 429 only
     "details": {...},        # structured context, when any
     "message": "..."}        # provider diagnostic, APP_DEBUG only

Status mapping:
- ValidationAppError → 400, CsrfAppError / AuthenticationAppError → 403
- MethodNotAllowedAppError → 405, RateLimitAppError → 429
- MailDeliveryAppError and anything unexpected → 500
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import (
    AppError,
    AuthenticationAppError,
    CsrfAppError,
    MailDeliveryAppError,
    MethodNotAllowedAppError,
    RateLimitAppError,
    ValidationAppError,
)
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (ValidationAppError, 400),
    (CsrfAppError, 403),
    (AuthenticationAppError, 403),
    (MethodNotAllowedAppError, 405),
    (RateLimitAppError, 429),
    (MailDeliveryAppError, 500),
)


def status_code_for(exc: AppError) -> int:
    """Map a domain error to its HTTP status (400 when unmapped)."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


def _error_body(error: str, code: str) -> dict[str, Any]:
    return {"error": error, "code": code, "request_id": get_request_id()}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a domain error.

    The ``message`` entry of ``exc.details`` holds provider diagnostics
    (e.g. the EmailJS error text). It is logged at the raise site and only
    echoed to the client when APP_DEBUG is on.
    """
    status_code = status_code_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request.rejected",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "path": request.url.path,
        },
    )

    content = _error_body(exc.message, exc.code)
    if isinstance(exc, RateLimitAppError):
        content["retryAfter"] = exc.retry_after

    details = dict(exc.details or {})
    diagnostic = details.pop("message", None)
    if details:
        content["details"] = details
    if diagnostic and settings.app.debug:
        content["message"] = diagnostic

    return JSONResponse(status_code=status_code, content=content, headers=exc.headers or None)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Give framework errors (unknown route, unrouted method) the same body shape."""
    if exc.status_code == 405:
        error, code = "Method not allowed", "method_not_allowed"
    elif exc.status_code == 404:
        error, code = str(exc.detail), "not_found"
    else:
        error, code = str(exc.detail), f"http_{exc.status_code}"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(error, code),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the failure, answer a generic 500 with no internals."""
    logger.error(
        "request.unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content=_error_body(
            "An unexpected error occurred. Please try again later.",
            "internal_server_error",
        ),
    )


def setup_exception_handlers(app) -> None:
    """Register the handlers on ``app``; call from the app factory."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
