"""Input sanitization and validation for product fields.

Helpers raise ``ValueError`` so they can back pydantic field validators
directly; callers outside pydantic translate to ``ValidationAppError``.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

MAX_PRICE = 999_999.99
MAX_TAGS = 10
MAX_TAG_LENGTH = 30

_DANGEROUS_PATTERNS = (
    re.compile(r"[<>]"),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+=", re.IGNORECASE),
)
_IMAGE_URL_PREFIXES = ("/", "https://", "data:image/")
_PRODUCT_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,50}$")


def sanitize_string(value: str, max_length: int = 255) -> str:
    """Trim, strip markup/script fragments, and truncate to ``max_length``."""
    if not isinstance(value, str):
        raise ValueError("Input must be a string")
    text = value.strip()
    for pattern in _DANGEROUS_PATTERNS:
        text = pattern.sub("", text)
    return text[:max_length]


def validate_product_name(name: Any) -> str:
    if not name or not isinstance(name, str):
        raise ValueError("Product name is required")
    sanitized = sanitize_string(name, 100)
    if len(sanitized) < 2:
        raise ValueError("Product name must be at least 2 characters long")
    return sanitized


def validate_category(category: Any) -> str:
    if not category or not isinstance(category, str):
        raise ValueError("Category is required")
    sanitized = sanitize_string(category, 50)
    if len(sanitized) < 2:
        raise ValueError("Category must be at least 2 characters long")
    return sanitized


def validate_price(price: Any) -> float:
    """Return the price rounded to cents.

    Booleans and non-numeric strings are rejected; zero is not a valid price.
    """
    if isinstance(price, bool):
        raise ValueError("Price must be a positive number")
    try:
        amount = float(price)
    except (TypeError, ValueError):
        raise ValueError("Price must be a positive number") from None
    if amount != amount or amount <= 0:  # NaN or non-positive
        raise ValueError("Price must be a positive number")
    if amount > MAX_PRICE:
        raise ValueError("Price cannot exceed $999,999.99")
    return round(amount, 2)


def validate_image_url(url: Any) -> str:
    """Accept relative paths, https URLs and inline image data URLs."""
    if not url or not isinstance(url, str):
        raise ValueError("Image URL is required")
    if not url.startswith(_IMAGE_URL_PREFIXES):
        raise ValueError("Invalid image URL format")
    return sanitize_string(url, 500)


def validate_tags(tags: Any) -> list[str]:
    """Keep up to ten non-empty string tags, each sanitized to 30 characters."""
    if not isinstance(tags, (list, tuple)):
        return []
    cleaned = [
        sanitize_string(tag, MAX_TAG_LENGTH)
        for tag in tags
        if isinstance(tag, str) and tag.strip()
    ]
    return cleaned[:MAX_TAGS]


def validate_image_urls(urls: Iterable[Any]) -> list[str]:
    return [validate_image_url(url) for url in urls]


def is_valid_product_id(product_id: str) -> bool:
    return bool(product_id) and _PRODUCT_ID_RE.match(product_id) is not None
