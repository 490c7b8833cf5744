"""FastAPI dependencies resolving shared services from the app container."""

from __future__ import annotations

from fastapi import Request

from app.core.container import AppContainer
from app.services.image_service import ImageManager
from app.services.product_service import ProductService


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_product_service(request: Request) -> ProductService:
    return get_container(request).product_service


def get_image_manager(request: Request) -> ImageManager:
    return get_container(request).image_manager
