"""Rate limiting adapters.

This package provides a small abstraction layer so contact submissions can be
throttled by an in-memory limiter today and by Redis or another shared store
later without changing the API layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemorySlidingWindowRateLimiter",
    "RateLimitResult",
]
