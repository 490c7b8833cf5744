"""Pydantic schemas for products and product API responses.

JSON uses camelCase for ``originalPrice`` to match existing API clients;
Python code uses snake_case names (``populate_by_name``).
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.validation import (
    validate_category,
    validate_image_url,
    validate_image_urls,
    validate_price,
    validate_product_name,
    validate_tags,
)


class Product(BaseModel):
    """A catalog product as stored and served."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Store-assigned identifier.")
    name: str
    price: float
    original_price: Optional[float] = Field(
        default=None,
        alias="originalPrice",
        description="Pre-discount price, when the product is on sale.",
    )
    category: str
    image: str = Field(..., description="Primary image URL.")
    images: Optional[List[str]] = None
    featured: bool = False
    tags: Optional[List[str]] = None


class ProductCreate(BaseModel):
    """Payload for creating a product; name, price, category and image are required."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    price: float
    original_price: Optional[float] = Field(default=None, alias="originalPrice")
    category: str
    image: str
    images: List[str] = Field(default_factory=list)
    featured: bool = False
    tags: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value: Any) -> str:
        return validate_product_name(value)

    @field_validator("category", mode="before")
    @classmethod
    def check_category(cls, value: Any) -> str:
        return validate_category(value)

    @field_validator("price", mode="before")
    @classmethod
    def check_price(cls, value: Any) -> float:
        return validate_price(value)

    @field_validator("original_price", mode="before")
    @classmethod
    def check_original_price(cls, value: Any) -> float | None:
        # 0 and empty values mean "not on sale"
        if not value:
            return None
        return validate_price(value)

    @field_validator("image", mode="before")
    @classmethod
    def check_image(cls, value: Any) -> str:
        return validate_image_url(value)

    @field_validator("images", mode="before")
    @classmethod
    def check_images(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return validate_image_urls(value)

    @field_validator("featured", mode="before")
    @classmethod
    def check_featured(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("tags", mode="before")
    @classmethod
    def check_tags(cls, value: Any) -> list[str]:
        return validate_tags(value)


class ProductUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    price: Optional[float] = None
    original_price: Optional[float] = Field(default=None, alias="originalPrice")
    category: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    featured: Optional[bool] = None
    tags: Optional[List[str]] = None

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value: Any) -> str:
        return validate_product_name(value)

    @field_validator("category", mode="before")
    @classmethod
    def check_category(cls, value: Any) -> str:
        return validate_category(value)

    @field_validator("price", mode="before")
    @classmethod
    def check_price(cls, value: Any) -> float:
        return validate_price(value)

    @field_validator("image", mode="before")
    @classmethod
    def check_image(cls, value: Any) -> str:
        return validate_image_url(value)

    @field_validator("original_price", mode="before")
    @classmethod
    def check_original_price(cls, value: Any) -> float | None:
        if not value:
            return None
        return validate_price(value)

    @field_validator("images", mode="before")
    @classmethod
    def check_images(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        if not isinstance(value, (list, tuple)):
            return []
        return validate_image_urls(value)

    @field_validator("featured", mode="before")
    @classmethod
    def check_featured(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("tags", mode="before")
    @classmethod
    def check_tags(cls, value: Any) -> list[str] | None:
        if value is None:
            return None
        return validate_tags(value)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly sent by the client, keyed by snake_case name."""
        return self.model_dump(exclude_unset=True)


class PriceRange(BaseModel):
    min: float
    max: float


class ProductFilters(BaseModel):
    """Query filters for product listings."""

    category: Optional[str] = None
    price_range: Optional[PriceRange] = None
    search: Optional[str] = None
    featured: Optional[bool] = None

    def active(self) -> set[str]:
        return {name for name, value in self if value is not None}


class ProductListResponse(BaseModel):
    success: bool = True
    data: List[Product]
    count: int


class ProductResponse(BaseModel):
    success: bool = True
    data: Product
    message: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
    count: Optional[int] = None


class SeedResponse(BaseModel):
    success: bool = True
    message: str
    count: int
    data: List[Product]
