from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.images import router as images_router
from app.api.routes.placeholder import router as placeholder_router
from app.api.routes.products import router as products_router

__all__ = ["health_router", "images_router", "placeholder_router", "products_router"]
