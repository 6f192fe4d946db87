"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- Swap-friendly: the limiter lives on ``app.state`` behind an abstract
  interface, so tests build a fresh one per app and a shared store (e.g.,
  Redis) can replace it without touching routes.
- Kill switch: RATE_LIMIT_ENABLED=false skips the check entirely.

Rate limiting strategy:
- Sliding window per client IP (5 submissions per hour by default).
- The client IP comes from the first X-Forwarded-For entry, then X-Real-IP,
  then the literal "unknown".
"""

from __future__ import annotations

import hashlib
import logging

from fastapi import Depends, Request

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.config import RateLimitSettings, settings
from app.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def create_rate_limiter(rate_limit_settings: RateLimitSettings | None = None) -> AbstractRateLimiter:
    """Build the process-wide limiter, starting its background sweep.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    cfg = rate_limit_settings or settings.rate_limit
    return InMemorySlidingWindowRateLimiter(
        max_requests=cfg.max_requests,
        window_seconds=cfg.window_seconds,
        sweep_interval_seconds=cfg.sweep_interval_seconds,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the running application."""

    return request.app.state.rate_limiter


def resolve_client_ip(request: Request) -> str:
    """Derive the client identifier from proxy headers.

    Args:
        request: FastAPI request.

    Returns:
        str: First X-Forwarded-For entry, else X-Real-IP, else "unknown".

    Examples:
        X-Forwarded-For: "1.2.3.4, 10.0.0.1" -> "1.2.3.4"
    """

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return UNKNOWN_CLIENT


def build_rate_limit_key(client_ip: str) -> str:
    """Namespace the client IP so other limiters can share the store."""

    return f"contact:{client_ip}"


def hash_client_key(key: str) -> str:
    """Hash the limiter key for logging without exposing the IP."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Quota headers sent on both admitted and throttled responses."""

    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": result.reset_at_iso,
    }


async def enforce_rate_limit(
    request: Request,
    limiter: AbstractRateLimiter = Depends(get_rate_limiter),
) -> RateLimitResult | None:
    """FastAPI dependency enforcing the per-IP submission quota.

    Consumes one slot from the requester's budget. Runs exactly once per
    request, before any body parsing or network I/O.

    Args:
        request: FastAPI request.
        limiter: Limiter owned by the application.

    Returns:
        RateLimitResult for the admitted request, or None when disabled.

    Raises:
        RateLimitAppError: 429 Too Many Requests when the quota is exhausted.
    """

    if not settings.rate_limit.enabled:
        return None

    key = build_rate_limit_key(resolve_client_ip(request))
    key_hash = hash_client_key(key)

    result = limiter.admit(key)
    if result.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return result

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": result.limit,
            "remaining": result.remaining,
            "retry_after_s": result.retry_after_seconds,
        },
    )

    headers = rate_limit_headers(result)
    headers["Retry-After"] = str(result.retry_after_seconds)

    raise RateLimitAppError(
        code="rate_limited",
        message="Trop de tentatives. Veuillez patienter avant de réessayer.",
        details={"retry_after": result.retry_after_seconds},
        headers=headers,
        retry_after=result.retry_after_seconds,
    )
