"""Unit tests for the in-memory SimpleTTLCache and the memoize decorator."""

import threading

import pytest

from app.services.product_cache import CacheKeys, ProductCaches
from app.utils.simple_cache import SimpleTTLCache, memoize


class FakeTime:
    """Deterministic clock used to test expiration logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def time(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def test_set_and_get_updates_hit_miss_counters() -> None:
    cache = SimpleTTLCache(10)

    assert cache.get("missing") is None

    cache.set("key", {"data": True})
    assert cache.get("key") == {"data": True}

    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["size"] == 1
    assert stats["keys"] == ["key"]


def test_entry_is_fresh_at_exact_ttl_and_stale_after() -> None:
    fake_time = FakeTime()
    cache = SimpleTTLCache(5, clock=fake_time.time)
    cache.set("key", "value")

    fake_time.advance(5)
    assert cache.get("key") == "value"

    fake_time.advance(0.001)
    assert cache.get("key") is None
    assert cache.stats()["evictions"] == 1
    assert len(cache) == 0


def test_per_entry_ttl_overrides_default() -> None:
    fake_time = FakeTime()
    cache = SimpleTTLCache(300, clock=fake_time.time)
    cache.set("short", 1, ttl=1)
    cache.set("long", 2)

    fake_time.advance(2)

    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_has_does_not_touch_counters() -> None:
    fake_time = FakeTime()
    cache = SimpleTTLCache(5, clock=fake_time.time)
    cache.set("key", "value")

    assert cache.has("key") is True
    assert cache.has("other") is False
    assert cache.stats()["hits"] == 0
    assert cache.stats()["misses"] == 0

    fake_time.advance(6)
    assert cache.has("key") is False


def test_delete_and_clear() -> None:
    cache = SimpleTTLCache(10)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.get("a")

    assert cache.delete("a") is True
    assert cache.delete("a") is False

    cache.clear()
    stats = cache.stats()
    assert stats["size"] == 0
    assert stats["hits"] == 0


def test_sweep_removes_only_stale_entries() -> None:
    fake_time = FakeTime()
    cache = SimpleTTLCache(10, clock=fake_time.time)
    cache.set("old", 1)
    fake_time.advance(8)
    cache.set("new", 2)

    fake_time.advance(3)

    assert cache.sweep() == 1
    assert cache.stats()["keys"] == ["new"]


def test_lru_eviction_when_capacity_exceeded() -> None:
    cache = SimpleTTLCache(10, max_entries=2)

    cache.set("first", 1)
    cache.set("second", 2)
    cache.get("first")  # first becomes most recently used
    cache.set("third", 3)

    assert cache.get("second") is None
    assert cache.get("first") == 1
    assert cache.get("third") == 3


def test_cache_is_thread_safe_under_concurrent_access() -> None:
    cache = SimpleTTLCache(10)

    def worker(offset: int) -> None:
        for i in range(200):
            cache.set(f"k{offset}-{i}", i)
            cache.get(f"k{offset}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 1000


def test_memoize_sync_caches_non_none_results() -> None:
    cache = SimpleTTLCache(10)
    calls: list[int] = []

    @memoize(cache, lambda n: f"square:{n}")
    def square(n: int) -> int:
        calls.append(n)
        return n * n

    assert square(3) == 9
    assert square(3) == 9
    assert calls == [3]
    assert cache.has("square:3")


def test_memoize_does_not_cache_none() -> None:
    cache = SimpleTTLCache(10)
    calls: list[str] = []

    @memoize(cache, lambda key: key)
    def lookup(key: str) -> None:
        calls.append(key)
        return None

    assert lookup("x") is None
    assert lookup("x") is None
    assert calls == ["x", "x"]
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_memoize_async_propagates_errors_without_caching() -> None:
    cache = SimpleTTLCache(10)
    attempts: list[int] = []

    @memoize(cache, lambda product_id: f"product:{product_id}")
    async def load(product_id: str) -> dict:
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("store unavailable")
        return {"id": product_id}

    with pytest.raises(RuntimeError):
        await load("42")
    assert not cache.has("product:42")

    assert await load("42") == {"id": "42"}
    assert await load("42") == {"id": "42"}
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_product_key_served_until_invalidated() -> None:
    fake_time = FakeTime()
    caches = ProductCaches(
        products=SimpleTTLCache(300, clock=fake_time.time, name="products"),
        api=SimpleTTLCache(60, clock=fake_time.time, name="api"),
    )
    loads: list[str] = []

    @memoize(caches.api, CacheKeys.product_by_id)
    async def load(product_id: str) -> dict:
        loads.append(product_id)
        return {"id": product_id, "version": len(loads)}

    assert (await load("42"))["version"] == 1
    fake_time.advance(30)
    assert (await load("42"))["version"] == 1

    invalidated = caches.invalidate_product_caches("42")
    assert invalidated == ["products:all", "products:featured", "product:42"]

    assert (await load("42"))["version"] == 2


def test_invalidation_clears_listings_and_api_list_keys() -> None:
    caches = ProductCaches(products=SimpleTTLCache(300, name="products"), api=SimpleTTLCache(60, name="api"))
    caches.products.set(CacheKeys.all_products(), ["p"])
    caches.products.set(CacheKeys.featured_products(), ["p"])
    caches.products.set(CacheKeys.products_by_category("Cookware"), ["p"])
    caches.products.set(CacheKeys.products_by_search("Pan"), ["p"])
    caches.api.set(CacheKeys.all_products(), ["p"])
    caches.api.set(CacheKeys.product_by_id("7"), {"id": "7"})
    caches.api.set(CacheKeys.product_by_id("8"), {"id": "8"})

    caches.invalidate_product_caches("7")

    assert len(caches.products) == 0
    assert caches.api.stats()["keys"] == ["product:8"]


def test_cache_key_naming() -> None:
    assert CacheKeys.all_products() == "products:all"
    assert CacheKeys.product_by_id("abc") == "product:abc"
    assert CacheKeys.products_by_category("Cook Ware") == "products:category:cook ware"
    assert CacheKeys.products_by_search("SkIlLeT") == "products:search:skillet"
    assert CacheKeys.featured_products() == "products:featured"


def test_rejects_non_positive_default_ttl() -> None:
    with pytest.raises(ValueError):
        SimpleTTLCache(0)


def test_set_with_ttl_then_invalidate_product() -> None:
    caches = ProductCaches(products=SimpleTTLCache(300, name="products"), api=SimpleTTLCache(60, name="api"))

    caches.products.set("product:42", {"name": "Widget"}, 5)
    assert caches.products.get("product:42") == {"name": "Widget"}

    caches.invalidate_product_caches("42")

    assert caches.products.get("product:42") is None
