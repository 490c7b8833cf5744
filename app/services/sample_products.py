"""Sample catalog used by the seed endpoint."""

from __future__ import annotations

from app.schemas.product import ProductCreate


def _placeholder(text: str) -> str:
    return f"/api/placeholder-image?width=400&height=300&text={text.replace(' ', '+')}"


SAMPLE_PRODUCTS: list[ProductCreate] = [
    ProductCreate(
        name="Cast Iron Skillet",
        price=39.99,
        original_price=49.99,
        category="Cookware",
        image=_placeholder("Cast Iron Skillet"),
        featured=True,
        tags=["cast iron", "skillet", "oven safe"],
    ),
    ProductCreate(
        name="Stainless Steel Saucepan",
        price=29.5,
        category="Cookware",
        image=_placeholder("Saucepan"),
        tags=["stainless", "saucepan"],
    ),
    ProductCreate(
        name="Chef Knife 8 inch",
        price=79.0,
        original_price=99.0,
        category="Cutlery",
        image=_placeholder("Chef Knife"),
        featured=True,
        tags=["knife", "german steel"],
    ),
    ProductCreate(
        name="Bamboo Cutting Board",
        price=24.99,
        category="Cutlery",
        image=_placeholder("Cutting Board"),
        tags=["bamboo", "board"],
    ),
    ProductCreate(
        name="Stand Mixer",
        price=299.99,
        original_price=349.99,
        category="Appliances",
        image=_placeholder("Stand Mixer"),
        featured=True,
        tags=["mixer", "baking"],
    ),
    ProductCreate(
        name="Electric Kettle",
        price=45.0,
        category="Appliances",
        image=_placeholder("Electric Kettle"),
        tags=["kettle", "tea"],
    ),
    ProductCreate(
        name="Glass Storage Set",
        price=34.99,
        category="Storage",
        image=_placeholder("Storage Set"),
        tags=["glass", "meal prep"],
    ),
    ProductCreate(
        name="Silicone Baking Mats",
        price=14.99,
        category="Bakeware",
        image=_placeholder("Baking Mats"),
        tags=["silicone", "baking"],
    ),
]
