"""Application container: the process-wide shared state.

One container is built per app instance and stored on ``app.state.container``.
It owns the product store, both caches, the three admission controllers and
the image manager, and starts/stops their background sweeps with the app
lifespan.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from app.adapters.products.base import AbstractProductRepository
from app.adapters.products.in_memory import InMemoryProductRepository
from app.core.config import Settings, settings as default_settings
from app.core.rate_limit import AdmissionControllers, build_admission_controllers
from app.services.image_service import ImageManager
from app.services.product_cache import ProductCaches
from app.services.product_service import ProductService

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    settings: Settings
    repository: AbstractProductRepository
    caches: ProductCaches
    admission: AdmissionControllers
    product_service: ProductService
    image_manager: ImageManager
    started_at: float = field(default_factory=time.time)

    async def start(self) -> None:
        await self.caches.start()
        await self.admission.start()
        logger.info(
            "container.started",
            extra={"sweep_interval_seconds": self.settings.sweep_interval_seconds},
        )

    async def stop(self) -> None:
        await self.admission.stop()
        await self.caches.stop()
        logger.info("container.stopped")


def build_repository(cfg: Settings) -> AbstractProductRepository:
    """Supabase when credentials are configured, otherwise the in-memory store."""
    if not cfg.database.configured:
        logger.warning("repository.in_memory", extra={"reason": "supabase_not_configured"})
        return InMemoryProductRepository()

    from supabase import create_client

    from app.adapters.products.supabase_repository import SupabaseProductRepository

    client = create_client(cfg.database.url, cfg.database.key)
    logger.info("repository.supabase", extra={"table": cfg.database.products_table})
    return SupabaseProductRepository(client=client, table_name=cfg.database.products_table)


def build_container(
    cfg: Settings | None = None,
    *,
    repository: AbstractProductRepository | None = None,
    clock: Callable[[], float] = time.time,
) -> AppContainer:
    cfg = cfg or default_settings
    repository = repository if repository is not None else build_repository(cfg)

    caches = ProductCaches.from_settings(
        cfg.cache,
        sweep_interval_seconds=cfg.sweep_interval_seconds,
        clock=clock,
    )
    admission = build_admission_controllers(
        cfg.rate_limit,
        sweep_interval_seconds=cfg.sweep_interval_seconds,
        clock=clock,
    )
    image_manager = ImageManager(
        cfg.images.uploads_dir,
        max_images=cfg.images.max_images,
        public_prefix=cfg.images.public_prefix,
        clock=clock,
    )

    return AppContainer(
        settings=cfg,
        repository=repository,
        caches=caches,
        admission=admission,
        product_service=ProductService(repository, caches),
        image_manager=image_manager,
    )
