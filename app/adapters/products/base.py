"""Product repository interface.

Implementations are synchronous (the Supabase client is); the service layer
runs them in the threadpool. Listing methods return newest products first.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from app.schemas.product import Product, ProductCreate, ProductFilters


class AbstractProductRepository(ABC):
    """Persistence contract for catalog products."""

    @abstractmethod
    def list_products(self) -> list[Product]:
        """Return every product, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get_product(self, product_id: str) -> Product | None:
        """Return the product with ``product_id`` or None."""
        raise NotImplementedError

    @abstractmethod
    def create_product(self, data: ProductCreate) -> Product:
        """Insert a product and return it with its assigned id."""
        raise NotImplementedError

    @abstractmethod
    def update_product(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        """Apply ``changes`` (snake_case field names) and return the updated product.

        Returns None when no product has ``product_id``.
        """
        raise NotImplementedError

    @abstractmethod
    def delete_product(self, product_id: str) -> bool:
        """Delete a product; False when it did not exist."""
        raise NotImplementedError

    @abstractmethod
    def filter_products(self, filters: ProductFilters) -> list[Product]:
        """Return products matching every active filter, newest first.

        - category: case-insensitive exact match
        - price_range: inclusive bounds
        - featured: exact match
        - search: case-insensitive substring of name or category
        """
        raise NotImplementedError

    @abstractmethod
    def bulk_insert(self, products: Sequence[ProductCreate]) -> list[Product]:
        raise NotImplementedError

    @abstractmethod
    def clear_all(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        raise NotImplementedError
