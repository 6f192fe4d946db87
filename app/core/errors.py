"""Domain errors raised by the contact pipeline.

Each AppError subclass corresponds to one HTTP status, resolved in
``app.core.exception_handlers``. Adapters raise their own low-level errors
(e.g. :class:`MailClientError`) which services wrap into AppErrors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured context attached to an error.

    ``message`` carries diagnostic text that is only returned to the client
    in debug mode.
    """

    message: str
    hint: str
    missing_fields: list[str]
    retry_after: int


@dataclass
class AppError(Exception):
    """Base error for failures that end the request with an error body.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable message, returned as ``error``.
        details: Optional structured context.
        headers: Extra response headers the HTTP layer must emit.
    """

    code: str
    message: str
    details: ErrorDetails | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Payload incomplete or malformed."""


class CsrfAppError(AppError):
    """Cookie/header token pair missing or mismatched."""


class AuthenticationAppError(AppError):
    """Admin API key missing, unknown, or not configured."""


class MethodNotAllowedAppError(AppError):
    """Contact endpoint called with anything but POST."""


@dataclass
class RateLimitAppError(AppError):
    """Client exhausted its submission quota."""

    retry_after: int = 0


class MailDeliveryAppError(AppError):
    """Mail service unconfigured or a dispatch failed."""


class MailClientError(Exception):
    """Low-level failure reported by a mail client adapter."""
