"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: a single lock guards the read-filter-append sequence and the
  background sweep, so two admits for the same key can never both see room
  for the last slot.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    attempts: list[float] = field(default_factory=list)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting admitted attempts over a sliding window per key.

    Unlike a fixed window, the eligible count is recomputed from the live
    timestamps on every call: a slot frees up exactly ``window_seconds``
    after the attempt that used it, not at a clock boundary.

    Expired entries are purged by a background sweeper thread started on
    construction (when ``sweep_interval_seconds`` is set) and stopped by
    :meth:`close`.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: float,
        sweep_interval_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            max_requests: Maximum admitted attempts per window.
            window_seconds: Sliding window duration in seconds.
            sweep_interval_seconds: Period of the background sweep. ``None``
                disables the sweeper thread (call :meth:`sweep` manually).
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If any limit is invalid.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        if sweep_interval_seconds is not None and sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be > 0")

        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._sweep_interval = sweep_interval_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, _Entry] = {}

        self._stop_event = threading.Event()
        self._sweeper: threading.Thread | None = None
        if sweep_interval_seconds is not None:
            self._start_sweeper()

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _live_attempts(self, entry: _Entry, now: float) -> list[float]:
        return [ts for ts in entry.attempts if now - ts < self._window_seconds]

    def admit(self, key: str) -> RateLimitResult:
        """Check the budget for ``key`` and record the attempt if allowed.

        Args:
            key: Unique identifier for rate limiting (e.g., client IP).

        Returns:
            RateLimitResult with allowance decision and timing metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)
            if entry is None:
                entry = _Entry()

            live = self._live_attempts(entry, now)
            count = len(live)
            oldest = live[0] if live else now
            reset_at = oldest + self._window_seconds

            if count < self._max_requests:
                live.append(now)
                entry.attempts = live
                self._entries[key] = entry
                return RateLimitResult(
                    allowed=True,
                    limit=self._max_requests,
                    remaining=self._max_requests - count - 1,
                    reset_at=reset_at,
                    retry_after_seconds=0,
                )

            entry.attempts = live
            return RateLimitResult(
                allowed=False,
                limit=self._max_requests,
                remaining=0,
                reset_at=reset_at,
                retry_after_seconds=max(0, math.ceil(reset_at - now)),
            )

    def sweep(self) -> int:
        """Drop every entry without a live attempt.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self._clock()
            expired = []
            for key, entry in self._entries.items():
                live = self._live_attempts(entry, now)
                if live:
                    entry.attempts = live
                else:
                    expired.append(key)
            for key in expired:
                del self._entries[key]
            tracked = len(self._entries)

        logger.debug(
            "rate_limit.sweep",
            extra={"removed": len(expired), "tracked_keys": tracked},
        )
        return len(expired)

    def reset(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def stats(self) -> dict[str, Any]:
        with self._lock:
            tracked = len(self._entries)
        return {
            "tracked_keys": tracked,
            "config": {
                "window_seconds": self._window_seconds,
                "max_requests": self._max_requests,
                "sweep_interval_seconds": self._sweep_interval,
            },
        }

    def _start_sweeper(self) -> None:
        self._stop_event.clear()
        self._sweeper = threading.Thread(
            target=self._sweep_loop,
            name="contact-rate-limit-sweeper",
            daemon=True,
        )
        self._sweeper.start()

    def _sweep_loop(self) -> None:
        # Event.wait returns True once close() is called
        while not self._stop_event.wait(self._sweep_interval):
            self.sweep()

    def close(self) -> None:
        """Stop the background sweeper and wait for it to exit."""
        self._stop_event.set()
        sweeper = self._sweeper
        if sweeper is not None and sweeper.is_alive():
            sweeper.join(timeout=5)
        self._sweeper = None

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and self._sweeper.is_alive()
