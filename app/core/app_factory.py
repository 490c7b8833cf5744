"""Application factory for FastAPI app.

Centralizes app construction (metadata, shared container, lifespan,
middleware, handlers, routers) so tests can build isolated apps.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api.routes import health_router, images_router, placeholder_router, products_router
from app.core.config import settings
from app.core.container import AppContainer, build_container
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the background sweeps on startup and cancel them on shutdown."""
    container: AppContainer = app.state.container
    container.settings.images.uploads_dir.mkdir(parents=True, exist_ok=True)
    await container.start()
    logger.info(
        "app.started",
        extra={"environment": container.settings.app_env, "version": container.settings.app.version},
    )
    try:
        yield
    finally:
        await container.stop()
        logger.info("app.stopped")


def create_app(container: AppContainer | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        container: Pre-built shared state; tests pass one with an in-memory
            store and a controllable clock.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    container = container or build_container(settings)
    cfg = container.settings

    app = FastAPI(
        title=cfg.app.name,
        description=(
            "Product catalog API: product CRUD with filtering and search, image "
            "upload and retention, SVG placeholders and health checks. Reads are "
            "served from a TTL cache invalidated on writes, and every endpoint "
            "except health is guarded by fixed-window rate limiting."
        ),
        version=cfg.app.version,
        debug=cfg.app.debug,
        lifespan=lifespan,
    )
    app.state.container = container

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    prefix = cfg.app.api_prefix
    app.include_router(products_router, prefix=prefix)
    app.include_router(images_router, prefix=prefix)
    app.include_router(placeholder_router, prefix=prefix)
    app.include_router(health_router, prefix=prefix)

    # Uploaded images are served as-is
    app.mount(
        cfg.images.public_prefix,
        StaticFiles(directory=cfg.images.uploads_dir, check_dir=False),
        name="uploads",
    )

    # OpenAPI customizations (tags, documented 429 responses)
    apply_openapi_customizations(app)

    return app
