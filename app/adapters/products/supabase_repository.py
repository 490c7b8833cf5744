"""Supabase implementation of the product repository."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence

from postgrest.exceptions import APIError
from supabase import Client

from app.adapters.products.base import AbstractProductRepository
from app.core.errors import DatabaseAppError
from app.schemas.product import Product, ProductCreate, ProductFilters

logger = logging.getLogger(__name__)

# Postgres "invalid_text_representation": a non-UUID id compared to a uuid column
_INVALID_ID_CODE = "22P02"
# Sentinel used to match every row in a DELETE (PostgREST requires a filter)
_NIL_UUID = "00000000-0000-0000-0000-000000000000"


def row_to_product(row: dict[str, Any]) -> Product:
    """Map a ``products`` row (snake_case, nullable columns) to a Product."""
    return Product(
        id=str(row["id"]),
        name=row["name"],
        price=float(row["price"]),
        original_price=row.get("original_price") or None,
        category=row["category"],
        image=row["image"],
        images=row.get("images") or None,
        featured=bool(row.get("featured")),
        tags=row.get("tags") or None,
    )


def product_to_row(data: ProductCreate) -> dict[str, Any]:
    return {
        "name": data.name,
        "price": data.price,
        "original_price": data.original_price or None,
        "category": data.category,
        "image": data.image,
        "images": data.images or None,
        "featured": data.featured,
        "tags": data.tags or None,
    }


def changes_to_row(changes: dict[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {}
    for field, value in changes.items():
        if field in ("original_price", "images", "tags"):
            row[field] = value or None
        else:
            row[field] = value
    row["updated_at"] = datetime.now(timezone.utc).isoformat()
    return row


@dataclass
class SupabaseProductRepository(AbstractProductRepository):
    """Supabase-backed repository for catalog products."""

    client: Client
    table_name: str = "products"

    def _table(self):  # type: ignore[no-untyped-def]
        return self.client.table(self.table_name)

    def _database_error(self, operation: str, exc: APIError, **details: Any) -> DatabaseAppError:
        logger.error(
            "database.query_failed",
            extra={"operation": operation, "db_error_code": exc.code, "error_msg": exc.message},
        )
        return DatabaseAppError(
            code="database_error",
            message=f"Failed to {operation}",
            details={**details, "context": {"db_error_code": exc.code}},
        )

    def _execute(self, operation: str, query):  # type: ignore[no-untyped-def]
        try:
            return query.execute()
        except APIError as exc:
            raise self._database_error(operation, exc) from exc

    def _execute_by_id(self, operation: str, product_id: str, query):  # type: ignore[no-untyped-def]
        """Run a query keyed by product id; a malformed id yields None."""
        try:
            return query.execute()
        except APIError as exc:
            if exc.code == _INVALID_ID_CODE:
                return None
            raise self._database_error(operation, exc, product_id=product_id) from exc

    def list_products(self) -> list[Product]:
        response = self._execute(
            "read products",
            self._table().select("*").order("created_at", desc=True),
        )
        return [row_to_product(row) for row in response.data or []]

    def get_product(self, product_id: str) -> Product | None:
        response = self._execute_by_id(
            "find product",
            product_id,
            self._table().select("*").eq("id", product_id).limit(1),
        )
        if response is None or not response.data:
            return None
        return row_to_product(response.data[0])

    def create_product(self, data: ProductCreate) -> Product:
        response = self._execute("add product", self._table().insert(product_to_row(data)))
        if not response.data:
            raise DatabaseAppError(code="database_error", message="Failed to add product")
        return row_to_product(response.data[0])

    def update_product(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        response = self._execute_by_id(
            "update product",
            product_id,
            self._table().update(changes_to_row(changes)).eq("id", product_id),
        )
        if response is None or not response.data:
            return None
        return row_to_product(response.data[0])

    def delete_product(self, product_id: str) -> bool:
        response = self._execute_by_id(
            "delete product",
            product_id,
            self._table().delete().eq("id", product_id),
        )
        return response is not None and bool(response.data)

    def filter_products(self, filters: ProductFilters) -> list[Product]:
        query = self._table().select("*")

        if filters.category:
            query = query.ilike("category", filters.category)

        if filters.price_range:
            query = query.gte("price", filters.price_range.min).lte("price", filters.price_range.max)

        if filters.featured is not None:
            query = query.eq("featured", filters.featured)

        if filters.search:
            term = f"%{filters.search.lower()}%"
            query = query.or_(f"name.ilike.{term},category.ilike.{term}")

        response = self._execute("filter products", query.order("created_at", desc=True))
        return [row_to_product(row) for row in response.data or []]

    def bulk_insert(self, products: Sequence[ProductCreate]) -> list[Product]:
        if not products:
            return []
        response = self._execute(
            "bulk insert products",
            self._table().insert([product_to_row(p) for p in products]),
        )
        return [row_to_product(row) for row in response.data or []]

    def clear_all(self) -> None:
        self._execute("clear products", self._table().delete().neq("id", _NIL_UUID))

    def count(self) -> int:
        response = self._execute(
            "count products",
            self._table().select("*", count="exact", head=True),
        )
        return response.count or 0
