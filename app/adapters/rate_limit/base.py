"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the per-process store can be swapped for a shared one (e.g., Redis) without
changing admission semantics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        count: Requests counted in the current window, including this one.
        reset_at: UNIX epoch seconds when the current window resets.
        retry_after_seconds: Whole seconds to wait when blocked.
    """

    allowed: bool
    limit: int
    count: int
    reset_at: float
    retry_after_seconds: int | None

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and report whether it is admitted.

        Args:
            key: Client identity (e.g., IP address, IP + user-agent).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep(self) -> int:
        """Drop entries whose window has already ended.

        Returns:
            Number of entries removed.
        """
        raise NotImplementedError

    async def start(self) -> None:
        """Start background maintenance, if the backend needs any."""

    async def stop(self) -> None:
        """Stop background maintenance started by :meth:`start`."""
