import pytest
from pydantic import ValidationError

from app.schemas.product import ProductCreate, ProductUpdate
from app.utils.validation import (
    is_valid_product_id,
    sanitize_string,
    validate_image_url,
    validate_price,
    validate_product_name,
    validate_tags,
)


def test_sanitize_string_strips_markup_and_truncates() -> None:
    assert sanitize_string("  <b>Pan</b>  ") == "bPan/b"
    assert sanitize_string("javascript:alert(1)") == "alert(1)"
    assert sanitize_string("img onerror=x") == "img x"
    assert sanitize_string("a" * 300) == "a" * 255


@pytest.mark.parametrize("value", [None, "", "a", "<>", 42])
def test_product_name_rejects_short_or_missing(value) -> None:
    with pytest.raises(ValueError):
        validate_product_name(value)


@pytest.mark.parametrize("value, expected", [(10, 10.0), ("12.346", 12.35), (999999.99, 999999.99)])
def test_price_accepts_positive_amounts(value, expected) -> None:
    assert validate_price(value) == expected


@pytest.mark.parametrize("value", [0, -1, True, "abc", None, float("nan"), 1_000_000])
def test_price_rejects_invalid(value) -> None:
    with pytest.raises(ValueError):
        validate_price(value)


@pytest.mark.parametrize(
    "url",
    ["/uploads/product_1_a.jpg", "https://cdn.example.com/a.png", "data:image/png;base64,AAAA"],
)
def test_image_url_accepts_known_prefixes(url: str) -> None:
    assert validate_image_url(url) == url


@pytest.mark.parametrize("url", ["http://example.com/a.png", "ftp://x", "", None])
def test_image_url_rejects_other_schemes(url) -> None:
    with pytest.raises(ValueError):
        validate_image_url(url)


def test_tags_are_cleaned_and_capped() -> None:
    tags = ["  steel ", "", 5, "x" * 40] + [f"t{i}" for i in range(12)]

    cleaned = validate_tags(tags)

    assert cleaned[0] == "steel"
    assert cleaned[1] == "x" * 30
    assert len(cleaned) == 10
    assert validate_tags("not a list") == []


@pytest.mark.parametrize(
    "product_id, valid",
    [
        ("0b5c1f2e-8a7d-4c2b-9f61-2f3a4b5c6d7e", True),
        ("abc_123", True),
        ("", False),
        ("has space", False),
        ("../etc/passwd", False),
        ("x" * 51, False),
    ],
)
def test_product_id_format(product_id: str, valid: bool) -> None:
    assert is_valid_product_id(product_id) is valid


def test_product_create_requires_core_fields() -> None:
    with pytest.raises(ValidationError) as exc_info:
        ProductCreate(name="Pan", price=5)

    missing = {error["loc"][0] for error in exc_info.value.errors()}
    assert {"category", "image"} <= missing


def test_product_create_normalizes_optional_fields() -> None:
    product = ProductCreate.model_validate(
        {
            "name": "Pan",
            "price": 5,
            "originalPrice": 0,
            "category": "Cookware",
            "image": "/uploads/a.jpg",
            "images": "nope",
            "featured": 1,
        }
    )

    assert product.original_price is None
    assert product.images == []
    assert product.tags == []
    assert product.featured is True


def test_product_update_only_reports_sent_fields() -> None:
    update = ProductUpdate.model_validate({"price": "19.999", "originalPrice": 25})

    assert update.changes() == {"price": 20.0, "original_price": 25.0}


def test_product_update_validates_provided_fields() -> None:
    with pytest.raises(ValidationError):
        ProductUpdate.model_validate({"image": "http://insecure.example.com/a.png"})
