"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins APP_ENV to ``testing`` and removes Supabase credentials so every
app built here runs against the in-memory product store.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_KEY", None)
os.environ.setdefault("LOG_LEVEL", "WARNING")

from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.adapters.products.in_memory import InMemoryProductRepository  # noqa: E402
from app.core.app_factory import create_app  # noqa: E402
from app.core.config import ImageSettings, Settings  # noqa: E402
from app.core.container import AppContainer, build_container  # noqa: E402
from app.schemas.product import ProductCreate  # noqa: E402


class FakeClock:
    """Deterministic time source for windows and TTLs."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def uploads_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def test_settings(uploads_dir: Path) -> Settings:
    return Settings(images=ImageSettings(uploads_dir=uploads_dir, max_images=3))


@pytest.fixture
def repository() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture
def container(test_settings: Settings, repository: InMemoryProductRepository, clock: FakeClock) -> AppContainer:
    return build_container(test_settings, repository=repository, clock=clock)


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def product_payload() -> dict:
    return {
        "name": "Cast Iron Skillet",
        "price": 39.99,
        "originalPrice": 49.99,
        "category": "Cookware",
        "image": "/uploads/product_1_abc.jpg",
        "featured": True,
        "tags": ["cast iron", "skillet"],
    }


@pytest.fixture
def make_product():
    """Factory for valid ProductCreate payloads with per-test overrides."""

    def _make(**overrides) -> ProductCreate:
        data = {
            "name": "Chef Knife",
            "price": 79.0,
            "category": "Cutlery",
            "image": "/uploads/product_2_def.jpg",
        }
        data.update(overrides)
        return ProductCreate(**data)

    return _make
