"""API key authentication for the admin endpoints.

The admin surface (rate-limit reset and stats) must never be reachable by
anonymous site visitors. Keys are validated against a comma-separated list
from APP_ADMIN_API_KEYS; when the list is empty every admin call is refused.

Design principles:
- Single Responsibility: Only handles API key validation
- Dependency Injection: Used via FastAPI Depends() for loose coupling
- Configuration-driven: Keys managed via env vars, not hardcoded
"""

from __future__ import annotations

import hashlib
import logging
import secrets
from typing import Annotated

from fastapi import Header

from app.core.config import settings
from app.core.errors import AuthenticationAppError

logger = logging.getLogger(__name__)


def parse_api_keys(keys_string: str | None) -> set[str]:
    """Parse comma-separated API keys into a set.

    Args:
        keys_string: Comma-separated string of API keys, or None.

    Returns:
        Set of trimmed, non-empty API keys.

    Examples:
        >>> parse_api_keys("key1, key2 , key3 ")
        {'key1', 'key2', 'key3'}
        >>> parse_api_keys(None)
        set()
    """
    if not keys_string:
        return set()

    return {key.strip() for key in keys_string.split(",") if key.strip()}


def _hash_key(key: str) -> str:
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def validate_admin_api_key(provided_key: str | None) -> None:
    """Validate that the provided key is one of the configured admin keys.

    Args:
        provided_key: API key to validate.

    Raises:
        AuthenticationAppError: If no keys are configured or the key is unknown.
    """
    valid_keys = parse_api_keys(settings.app.admin_api_keys)

    if not valid_keys:
        logger.error(
            "admin_auth_failed",
            extra={"reason": "admin_keys_not_configured"},
        )
        raise AuthenticationAppError(
            code="admin_keys_not_configured",
            message="Admin endpoints are disabled: no admin API keys are configured",
            details={"hint": "Set APP_ADMIN_API_KEYS to enable the admin endpoints"},
        )

    if not provided_key or not any(
        secrets.compare_digest(provided_key.encode(), key.encode()) for key in valid_keys
    ):
        logger.warning(
            "admin_auth_failed",
            extra={
                "reason": "invalid_api_key",
                "api_key_hash": _hash_key(provided_key) if provided_key else None,
            },
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Invalid or missing API key",
        )


async def verify_admin_api_key(
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency for admin authentication.

    Usage:
        @router.get("/admin/thing", dependencies=[Depends(verify_admin_api_key)])
        async def admin_thing():
            ...

    Args:
        x_api_key: API key from X-API-Key header (injected by FastAPI).

    Raises:
        AuthenticationAppError: 403 Forbidden if authentication fails.
    """
    validate_admin_api_key(x_api_key)
    logger.info(
        "admin_auth.success",
        extra={"api_key_hash": _hash_key(x_api_key or "")},
    )
