"""In-memory TTL cache used to memoize product reads.

Thread-safe, per-process, and easy to swap for a shared store while keeping
the same interface. ``None`` doubles as the "absent" marker, so ``None``
values are never served from the cache.
"""

from __future__ import annotations

import functools
import inspect
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from app.utils.sweeper import PeriodicSweeper

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class CacheItem:
    """Container for a cached value with its freshness metadata."""

    value: Any
    stored_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.stored_at <= self.ttl


class SimpleTTLCache:
    """Thread-safe, in-memory cache with per-entry TTL and optional LRU cap.

    Attributes:
        default_ttl_seconds: TTL applied when ``set`` gets no explicit ttl.
        max_entries: Maximum number of cached items (None for unlimited).
    """

    def __init__(
        self,
        default_ttl_seconds: float = 300.0,
        max_entries: int | None = None,
        *,
        clock: Callable[[], float] = time.time,
        sweep_interval_seconds: float = 60.0,
        name: str = "cache",
    ) -> None:
        if default_ttl_seconds <= 0:
            raise ValueError("default_ttl_seconds must be > 0")
        self.name = name
        self.default_ttl_seconds = default_ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._store: OrderedDict[str, CacheItem] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._sweeper = PeriodicSweeper(
            self.sweep,
            interval_seconds=sweep_interval_seconds,
            name=f"cache:{name}",
        )

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"SimpleTTLCache(name={self.name!r}, default_ttl_seconds={self.default_ttl_seconds}, "
            f"size={len(self._store)}, hits={self._hits}, misses={self._misses})"
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing or stale.

        A stale entry is evicted as part of the read.
        """

        with self._lock:
            item = self._store.get(key)
            if item is None:
                self._misses += 1
                logger.debug("cache.miss", extra={"cache": self.name, "cache_key": key, "reason": "not_found"})
                return None

            if not item.is_fresh(self._clock()):
                self._evict_single(key)
                self._misses += 1
                logger.debug("cache.miss", extra={"cache": self.name, "cache_key": key, "reason": "expired"})
                return None

            self._hits += 1
            self._store.move_to_end(key)
            logger.debug("cache.hit", extra={"cache": self.name, "cache_key": key})
            return item.value

    def has(self, key: str) -> bool:
        """Freshness check without touching hit/miss counters."""

        with self._lock:
            item = self._store.get(key)
            if item is None:
                return False
            if not item.is_fresh(self._clock()):
                self._evict_single(key)
                return False
            return True

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value`` under ``key``, replacing any previous entry.

        Args:
            key: Cache key.
            value: Value to store.
            ttl: Seconds the entry stays fresh; defaults to ``default_ttl_seconds``.
        """

        effective_ttl = self.default_ttl_seconds if ttl is None else ttl
        with self._lock:
            self._store[key] = CacheItem(value=value, stored_at=self._clock(), ttl=effective_ttl)
            self._store.move_to_end(key)
            self._evict_if_over_capacity_locked()
            logger.debug(
                "cache.set",
                extra={"cache": self.name, "cache_key": key, "size": len(self._store), "ttl_s": effective_ttl},
            )

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._store.pop(key, None) is not None

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def sweep(self) -> int:
        """Evict every stale entry; returns how many were removed."""

        now = self._clock()
        with self._lock:
            expired = [k for k, item in list(self._store.items()) if not item.is_fresh(now)]
            for key in expired:
                self._evict_single(key)
        return len(expired)

    def stats(self) -> dict[str, Any]:
        """Best-effort snapshot for diagnostics; values are never exposed."""

        with self._lock:
            return {
                "name": self.name,
                "default_ttl_seconds": self.default_ttl_seconds,
                "max_entries": self.max_entries,
                "size": len(self._store),
                "keys": list(self._store.keys()),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    async def start(self) -> None:
        await self._sweeper.start()

    async def stop(self) -> None:
        await self._sweeper.stop()

    def _evict_single(self, key: str) -> None:
        if self._store.pop(key, None) is not None:
            self._evictions += 1

    def _evict_if_over_capacity_locked(self) -> None:
        if self.max_entries is None:
            return

        while len(self._store) > self.max_entries:
            # popitem(last=False) removes the least recently used entry
            self._store.popitem(last=False)
            self._evictions += 1


def memoize(
    cache: SimpleTTLCache,
    key_builder: Callable[..., str],
    *,
    ttl: float | None = None,
) -> Callable[[F], F]:
    """Cache a function's results in ``cache`` under ``key_builder(*args, **kwargs)``.

    Works for both plain and ``async`` functions; for coroutines the resolved
    value is cached. Exceptions propagate and nothing is stored. Concurrent
    misses for the same key are not coalesced: each computes and the last
    write wins.

    Usage:
        @memoize(cache, lambda product_id: f"product:{product_id}")
        async def load_product(product_id: str) -> Product: ...
    """

    def decorator(func: F) -> F:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                key = key_builder(*args, **kwargs)
                cached = cache.get(key)
                if cached is not None:
                    return cached
                result = await func(*args, **kwargs)
                if result is not None:
                    cache.set(key, result, ttl)
                return result

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            key = key_builder(*args, **kwargs)
            cached = cache.get(key)
            if cached is not None:
                return cached
            result = func(*args, **kwargs)
            if result is not None:
                cache.set(key, result, ttl)
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
