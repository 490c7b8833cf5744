"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state (sync endpoints run in a pool).
- Windows are per key: a window opens on the first request from a key and
  lasts ``window_seconds`` from then, rather than being aligned to the clock.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.utils.sweeper import PeriodicSweeper


@dataclass
class _WindowState:
    count: int
    reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per key.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
        sweep_interval_seconds: float = 60.0,
        name: str = "rate_limit",
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of admitted requests per window.
            window_seconds: Length of a window in seconds (fractions allowed).
            clock: Time source function returning UNIX time in seconds.
            sweep_interval_seconds: How often the background sweep runs.
            name: Label used in logs.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self.name = name
        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _WindowState] = {}
        self._sweeper = PeriodicSweeper(
            self.sweep,
            interval_seconds=sweep_interval_seconds,
            name=f"rate_limit:{name}",
        )

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def consume(self, key: str) -> RateLimitResult:
        """Count one request for ``key``.

        A missing or expired entry is replaced by a fresh window with count 1.
        Otherwise the count is incremented, also for requests that end up
        rejected, so hammering a key does not earn it extra budget.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            state = self._state_by_key.get(key)
            if state is None or now >= state.reset_at:
                state = _WindowState(count=1, reset_at=now + self._window_seconds)
                self._state_by_key[key] = state
                return self._result(state, now, allowed=True)

            state.count += 1
            return self._result(state, now, allowed=state.count <= self._limit)

    def _result(self, state: _WindowState, now: float, *, allowed: bool) -> RateLimitResult:
        retry_after = None
        if not allowed:
            retry_after = max(0, int(math.ceil(state.reset_at - now)))
        return RateLimitResult(
            allowed=allowed,
            limit=self._limit,
            count=state.count,
            reset_at=state.reset_at,
            retry_after_seconds=retry_after,
        )

    def sweep(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [k for k, s in list(self._state_by_key.items()) if now > s.reset_at]
            for key in expired:
                self._state_by_key.pop(key, None)
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    async def start(self) -> None:
        await self._sweeper.start()

    async def stop(self) -> None:
        await self._sweeper.stop()
