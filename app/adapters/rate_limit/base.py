"""Rate limiter interfaces.

The API should depend on this abstraction (not the concrete implementation)
so we can swap storage backends later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class RateLimitResult:
    """Result of an admit operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Requests left in the window after this one (0 when blocked).
        reset_at: UNIX epoch seconds at which the oldest live attempt expires.
        retry_after_seconds: Whole seconds to wait when blocked, 0 when allowed.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: int

    @property
    def reset_at_iso(self) -> str:
        """Reset time as an ISO-8601 UTC string with millisecond precision."""
        moment = datetime.fromtimestamp(self.reset_at, tz=timezone.utc)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def admit(self, key: str) -> RateLimitResult:
        """Check the key's budget and record the attempt when allowed.

        Args:
            key: Unique client identifier (e.g., IP address).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self, key: str) -> bool:
        """Forget every recorded attempt for ``key``.

        Returns:
            True if an entry existed.
        """
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Return the number of tracked keys and the active configuration."""
        raise NotImplementedError

    def close(self) -> None:
        """Release background resources. No-op by default."""
