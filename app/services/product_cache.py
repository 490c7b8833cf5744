"""Cache key naming and invalidation for product reads.

Every reader and writer must go through these helpers so that writes
invalidate exactly the keys readers populate.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from app.core.config import CacheSettings
from app.utils.simple_cache import SimpleTTLCache

logger = logging.getLogger(__name__)


class CacheKeys:
    """Key naming convention shared by readers and invalidation."""

    @staticmethod
    def all_products() -> str:
        return "products:all"

    @staticmethod
    def product_by_id(product_id: str) -> str:
        return f"product:{product_id}"

    @staticmethod
    def products_by_category(category: str) -> str:
        return f"products:category:{category.lower()}"

    @staticmethod
    def products_by_search(term: str) -> str:
        return f"products:search:{term.lower()}"

    @staticmethod
    def featured_products() -> str:
        return "products:featured"


@dataclass
class ProductCaches:
    """The two process-wide caches: product listings and API responses."""

    products: SimpleTTLCache
    api: SimpleTTLCache

    @classmethod
    def from_settings(
        cls,
        cfg: CacheSettings,
        *,
        sweep_interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> "ProductCaches":
        return cls(
            products=SimpleTTLCache(
                cfg.product_ttl_seconds,
                cfg.max_entries,
                clock=clock,
                sweep_interval_seconds=sweep_interval_seconds,
                name="products",
            ),
            api=SimpleTTLCache(
                cfg.api_ttl_seconds,
                cfg.max_entries,
                clock=clock,
                sweep_interval_seconds=sweep_interval_seconds,
                name="api",
            ),
        )

    def all(self) -> list[SimpleTTLCache]:
        return [self.products, self.api]

    def invalidate_product_caches(self, product_id: str | None = None) -> list[str]:
        """Drop every product listing and the response-level product keys.

        The products cache holds listings under many category and search
        keys, so it is cleared wholesale. The api cache loses only the
        list-level keys and, if known, the product's own entry.

        Returns:
            The keys removed from the api cache.
        """
        self.products.clear()

        keys = [CacheKeys.all_products(), CacheKeys.featured_products()]
        if product_id:
            keys.append(CacheKeys.product_by_id(product_id))
        for key in keys:
            self.api.delete(key)

        logger.info("cache.invalidated", extra={"cache_keys": keys, "cleared": self.products.name})
        return keys

    def stats(self) -> dict[str, dict]:
        return {cache.name: cache.stats() for cache in self.all()}

    async def start(self) -> None:
        for cache in self.all():
            await cache.start()

    async def stop(self) -> None:
        for cache in self.all():
            await cache.stop()
