"""CSRF protection using the double-submit cookie pattern.

Flow:
- ``csrf_cookie_middleware`` issues a random token in a cookie on the first
  request of a session that lacks one (static assets excluded).
- Browser scripts read the cookie and echo it in the ``X-CSRF-Token`` header.
- ``verify_csrf`` (a route dependency) requires both values to be present and
  equal, otherwise the request is rejected with 403.

The cookie is readable by page scripts (no HttpOnly) and SameSite=Strict.
"""

from __future__ import annotations

import logging
import re
import secrets
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.errors import CsrfAppError

logger = logging.getLogger(__name__)

_STATIC_PREFIXES = ("/_next/static", "/_next/image", "/static/", "/favicon.ico")
_STATIC_EXTENSIONS = re.compile(r"\.(?:svg|png|jpg|jpeg|gif|webp)$", re.IGNORECASE)


def is_static_asset(path: str) -> bool:
    """Return True for paths that never need a CSRF cookie.

    Examples:
        >>> is_static_asset("/favicon.ico")
        True
        >>> is_static_asset("/images/logo.svg")
        True
        >>> is_static_asset("/contact")
        False
    """
    return path.startswith(_STATIC_PREFIXES) or bool(_STATIC_EXTENSIONS.search(path))


def generate_csrf_token() -> str:
    """Return a new unpredictable token (random UUID4)."""
    return str(uuid.uuid4())


def set_csrf_cookie(response: Response, token: str) -> None:
    """Persist ``token`` client-side with the session cookie attributes."""
    response.set_cookie(
        key=settings.csrf.cookie_name,
        value=token,
        httponly=False,
        secure=settings.csrf_cookie_secure,
        samesite="strict",
        path="/",
    )


async def csrf_cookie_middleware(request: Request, call_next) -> Response:
    """Ensure every non-static response leaves the client holding a token.

    The token is set once per session and never rotated; an existing cookie
    is left untouched.
    """

    if is_static_asset(request.url.path):
        return await call_next(request)

    existing = request.cookies.get(settings.csrf.cookie_name)
    response: Response = await call_next(request)

    if not existing:
        set_csrf_cookie(response, generate_csrf_token())
        logger.debug("csrf.issued", extra={"path": request.url.path})

    return response


def validate_csrf_tokens(cookie_token: str | None, header_token: str | None) -> None:
    """Check that the cookie token and the echoed header token match.

    Args:
        cookie_token: Value persisted in the CSRF cookie.
        header_token: Value received in the CSRF header.

    Raises:
        CsrfAppError: If either value is missing or they differ.
    """
    if (
        not cookie_token
        or not header_token
        or not secrets.compare_digest(cookie_token.encode(), header_token.encode())
    ):
        raise CsrfAppError(
            code="csrf_invalid",
            message="Invalid CSRF token",
            details={"hint": "Reload the page to obtain a fresh token and retry once"},
        )


async def verify_csrf(request: Request) -> None:
    """FastAPI dependency enforcing the double-submit check.

    Usage:
        @router.post("/contact")
        async def submit(_: None = Depends(verify_csrf)):
            ...

    Raises:
        CsrfAppError: 403 when the token pair is absent or mismatched.
    """
    cookie_token = request.cookies.get(settings.csrf.cookie_name)
    header_token = request.headers.get(settings.csrf.header_name)

    try:
        validate_csrf_tokens(cookie_token, header_token)
    except CsrfAppError:
        logger.warning(
            "csrf.rejected",
            extra={
                "cookie_present": bool(cookie_token),
                "header_present": bool(header_token),
                "path": request.url.path,
            },
        )
        raise
