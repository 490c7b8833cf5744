"""Product catalog service: cached reads, invalidating writes.

Sits between the HTTP routes and the product repository:
- Single-filter listings are memoized in the products cache
- Single products are memoized in the api cache
- Every create/update/delete clears the listings and drops the product key
- Blocking repository calls run in the threadpool
"""

from __future__ import annotations

import logging
from typing import Sequence

from fastapi.concurrency import run_in_threadpool

from app.adapters.products.base import AbstractProductRepository
from app.core.errors import ConflictAppError, NotFoundAppError, ValidationAppError
from app.schemas.product import Product, ProductCreate, ProductFilters, ProductUpdate
from app.services.product_cache import CacheKeys, ProductCaches
from app.utils.simple_cache import memoize
from app.utils.validation import is_valid_product_id

logger = logging.getLogger(__name__)


def ensure_valid_product_id(product_id: str) -> str:
    if not is_valid_product_id(product_id):
        raise ValidationAppError(
            code="invalid_product_id",
            message="Invalid ID format",
            details={"product_id": product_id[:64]},
        )
    return product_id


class ProductService:
    """Application service for catalog operations.

    Attributes:
        repository: Product persistence adapter.
        caches: Product/API caches shared across requests.
    """

    def __init__(self, repository: AbstractProductRepository, caches: ProductCaches) -> None:
        self.repository = repository
        self.caches = caches

        cache = caches.products
        self._list_all = memoize(cache, CacheKeys.all_products)(self._fetch_all)
        self._list_featured = memoize(cache, CacheKeys.featured_products)(self._fetch_featured)
        self._list_by_category = memoize(cache, CacheKeys.products_by_category)(self._fetch_by_category)
        self._list_by_search = memoize(cache, CacheKeys.products_by_search)(self._fetch_by_search)
        self._get_by_id = memoize(caches.api, CacheKeys.product_by_id)(self._fetch_one)

    async def _fetch_all(self) -> list[Product]:
        return await run_in_threadpool(self.repository.list_products)

    async def _fetch_featured(self) -> list[Product]:
        return await run_in_threadpool(self.repository.filter_products, ProductFilters(featured=True))

    async def _fetch_by_category(self, category: str) -> list[Product]:
        return await run_in_threadpool(self.repository.filter_products, ProductFilters(category=category))

    async def _fetch_by_search(self, term: str) -> list[Product]:
        return await run_in_threadpool(self.repository.filter_products, ProductFilters(search=term))

    async def _fetch_one(self, product_id: str) -> Product | None:
        return await run_in_threadpool(self.repository.get_product, product_id)

    async def list_products(self, filters: ProductFilters | None = None) -> list[Product]:
        """List products, served from cache when only one simple filter is set."""
        filters = filters or ProductFilters()
        active = filters.active()

        if not active:
            return await self._list_all()
        if active == {"featured"} and filters.featured:
            return await self._list_featured()
        if active == {"category"}:
            return await self._list_by_category(filters.category)
        if active == {"search"}:
            return await self._list_by_search(filters.search)

        # Combined filters are not cached: too many key combinations to invalidate
        return await run_in_threadpool(self.repository.filter_products, filters)

    async def get_product(self, product_id: str) -> Product:
        ensure_valid_product_id(product_id)
        product = await self._get_by_id(product_id)
        if product is None:
            raise NotFoundAppError(
                code="product_not_found",
                message="Product not found",
                details={"product_id": product_id},
            )
        return product

    async def create_product(self, data: ProductCreate) -> Product:
        product = await run_in_threadpool(self.repository.create_product, data)
        self.caches.invalidate_product_caches(product.id)
        logger.info("product.created", extra={"product_id": product.id, "category": product.category})
        return product

    async def update_product(self, product_id: str, data: ProductUpdate) -> Product:
        ensure_valid_product_id(product_id)
        changes = data.changes()
        if not changes:
            return await self.get_product(product_id)

        updated = await run_in_threadpool(self.repository.update_product, product_id, changes)
        if updated is None:
            raise NotFoundAppError(
                code="product_not_found",
                message="Product not found",
                details={"product_id": product_id},
            )
        self.caches.invalidate_product_caches(product_id)
        logger.info("product.updated", extra={"product_id": product_id, "fields": sorted(changes)})
        return updated

    async def delete_product(self, product_id: str) -> None:
        ensure_valid_product_id(product_id)
        deleted = await run_in_threadpool(self.repository.delete_product, product_id)
        if not deleted:
            raise NotFoundAppError(
                code="product_not_found",
                message="Product not found",
                details={"product_id": product_id},
            )
        self.caches.invalidate_product_caches(product_id)
        logger.info("product.deleted", extra={"product_id": product_id})

    async def seed(self, samples: Sequence[ProductCreate]) -> list[Product]:
        """Insert sample products into an empty catalog."""
        existing = await run_in_threadpool(self.repository.count)
        if existing > 0:
            raise ConflictAppError(
                code="products_exist",
                message="Products already exist. Use force=true to overwrite.",
                details={"count": existing},
            )
        inserted = await run_in_threadpool(self.repository.bulk_insert, list(samples))
        self.caches.invalidate_product_caches()
        logger.info("product.seeded", extra={"count": len(inserted)})
        return inserted

    async def clear_all(self, *, force: bool) -> None:
        if not force:
            raise ValidationAppError(
                code="confirmation_required",
                message="Use force=true to confirm deletion of all products",
            )
        await run_in_threadpool(self.repository.clear_all)
        self.caches.invalidate_product_caches()
        # Single products live in the api cache
        self.caches.api.clear()
        logger.warning("product.cleared_all")

    async def count(self) -> int:
        return await run_in_threadpool(self.repository.count)

    async def referenced_image_urls(self) -> set[str]:
        """Image URLs used by any product, for unused-image cleanup."""
        products = await run_in_threadpool(self.repository.list_products)
        urls: set[str] = set()
        for product in products:
            urls.add(product.image)
            urls.update(product.images or [])
        return urls
