"""In-process product store.

Used for local development when Supabase is not configured, and by the test
suite. Data lives only as long as the process.
"""

from __future__ import annotations

import itertools
import threading
import uuid
from typing import Any, Sequence

from app.adapters.products.base import AbstractProductRepository
from app.schemas.product import Product, ProductCreate, ProductFilters


class InMemoryProductRepository(AbstractProductRepository):
    """Thread-safe dict-backed repository that mirrors the Supabase semantics.

    Search additionally matches tags, which the hosted store cannot do in a
    single ``or`` filter over array columns.
    """

    def __init__(self, products: Sequence[Product] = ()) -> None:
        self._lock = threading.RLock()
        self._sequence = itertools.count()
        # product id -> (insertion sequence, product)
        self._rows: dict[str, tuple[int, Product]] = {}
        for product in products:
            self._rows[product.id] = (next(self._sequence), product)

    def _newest_first(self) -> list[Product]:
        rows = sorted(self._rows.values(), key=lambda item: item[0], reverse=True)
        return [product for _, product in rows]

    def _insert(self, data: ProductCreate) -> Product:
        product = Product(id=str(uuid.uuid4()), **data.model_dump())
        self._rows[product.id] = (next(self._sequence), product)
        return product

    def list_products(self) -> list[Product]:
        with self._lock:
            return self._newest_first()

    def get_product(self, product_id: str) -> Product | None:
        with self._lock:
            row = self._rows.get(product_id)
            return row[1] if row else None

    def create_product(self, data: ProductCreate) -> Product:
        with self._lock:
            return self._insert(data)

    def update_product(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        with self._lock:
            row = self._rows.get(product_id)
            if row is None:
                return None
            sequence, product = row
            updated = product.model_copy(update=changes)
            self._rows[product_id] = (sequence, updated)
            return updated

    def delete_product(self, product_id: str) -> bool:
        with self._lock:
            return self._rows.pop(product_id, None) is not None

    def filter_products(self, filters: ProductFilters) -> list[Product]:
        with self._lock:
            products = self._newest_first()

        if filters.category:
            category = filters.category.lower()
            products = [p for p in products if p.category.lower() == category]

        if filters.price_range:
            low, high = filters.price_range.min, filters.price_range.max
            products = [p for p in products if low <= p.price <= high]

        if filters.featured is not None:
            products = [p for p in products if p.featured == filters.featured]

        if filters.search:
            term = filters.search.lower()
            products = [
                p
                for p in products
                if term in p.name.lower()
                or term in p.category.lower()
                or any(term in tag.lower() for tag in p.tags or [])
            ]

        return products

    def bulk_insert(self, products: Sequence[ProductCreate]) -> list[Product]:
        with self._lock:
            return [self._insert(data) for data in products]

    def clear_all(self) -> None:
        with self._lock:
            self._rows.clear()

    def count(self) -> int:
        with self._lock:
            return len(self._rows)
