from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status

from app.api.dependencies import get_product_service
from app.core.rate_limit import require_admission
from app.schemas.product import (
    MessageResponse,
    PriceRange,
    ProductCreate,
    ProductFilters,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
    SeedResponse,
)
from app.services.product_service import ProductService
from app.services.sample_products import SAMPLE_PRODUCTS

router = APIRouter(tags=["Products"])

_read_admission = [Depends(require_admission("api", "bot"))]
_write_admission = [Depends(require_admission("strict"))]


@router.get("/products", response_model=ProductListResponse, dependencies=_read_admission)
async def list_products(
    category: Optional[str] = Query(None, description="Case-insensitive category match"),
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    search: Optional[str] = Query(None, description="Substring of name, category or tags"),
    featured: Optional[str] = Query(None, description="'true' to list featured products only"),
    service: ProductService = Depends(get_product_service),
) -> ProductListResponse:
    """List products, optionally filtered.

    The price range only applies when both ``minPrice`` and ``maxPrice`` are given.
    """
    filters = ProductFilters(
        category=category or None,
        price_range=(
            PriceRange(min=min_price, max=max_price)
            if min_price is not None and max_price is not None
            else None
        ),
        search=search or None,
        featured=True if featured == "true" else None,
    )
    products = await service.list_products(filters)
    return ProductListResponse(data=products, count=len(products))


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_write_admission,
)
async def create_product(
    payload: ProductCreate,
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    product = await service.create_product(payload)
    return ProductResponse(data=product, message="Product created successfully")


@router.post(
    "/products/seed",
    response_model=SeedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=_write_admission,
)
async def seed_products(service: ProductService = Depends(get_product_service)) -> SeedResponse:
    """Load the sample catalog into an empty store (409 if products exist)."""
    products = await service.seed(SAMPLE_PRODUCTS)
    return SeedResponse(
        message="Sample products seeded successfully",
        count=len(products),
        data=products,
    )


@router.delete("/products/seed", response_model=MessageResponse, dependencies=_write_admission)
async def clear_products(
    force: Optional[str] = Query(None, description="Must be 'true' to confirm"),
    service: ProductService = Depends(get_product_service),
) -> MessageResponse:
    await service.clear_all(force=force == "true")
    return MessageResponse(message="All products cleared successfully")


@router.get("/products/{product_id}", response_model=ProductResponse, dependencies=_read_admission)
async def get_product(
    product_id: str = Path(...),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    product = await service.get_product(product_id)
    return ProductResponse(data=product)


async def _update(product_id: str, payload: ProductUpdate, service: ProductService) -> ProductResponse:
    product = await service.update_product(product_id, payload)
    return ProductResponse(data=product, message="Product updated successfully")


@router.put("/products/{product_id}", response_model=ProductResponse, dependencies=_write_admission)
async def replace_product(
    product_id: str = Path(...),
    payload: ProductUpdate = Body(...),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    """Update a product. Like PATCH, only the provided fields change."""
    return await _update(product_id, payload, service)


@router.patch("/products/{product_id}", response_model=ProductResponse, dependencies=_write_admission)
async def patch_product(
    product_id: str = Path(...),
    payload: ProductUpdate = Body(...),
    service: ProductService = Depends(get_product_service),
) -> ProductResponse:
    return await _update(product_id, payload, service)


@router.delete("/products/{product_id}", response_model=MessageResponse, dependencies=_write_admission)
async def delete_product(
    product_id: str = Path(...),
    service: ProductService = Depends(get_product_service),
) -> MessageResponse:
    await service.delete_product(product_id)
    return MessageResponse(message="Product deleted successfully")
