from __future__ import annotations

import logging
import resource
import sys
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.dependencies import get_container
from app.core.container import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


def _max_rss_mb() -> float:
    max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # ru_maxrss is bytes on macOS, kilobytes elsewhere
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return round(max_rss / divisor, 1)


@router.get("/health")
async def health_check(container: AppContainer = Depends(get_container)) -> JSONResponse:
    """Health check endpoint.

    Probes the product store and reports process memory and cache sizes.
    Used by load balancers and monitoring systems to determine service health.

    Returns:
        200 with ``status: healthy`` when the store answers, otherwise 503.
    """
    started = time.perf_counter()

    db_status = "healthy"
    product_count = 0
    try:
        product_count = await container.product_service.count()
    except Exception as e:
        db_status = "unhealthy"
        logger.error(
            "health.database_failed",
            extra={"error_type": type(e).__name__, "error": str(e)},
        )

    response_time_ms = round((time.perf_counter() - started) * 1000, 2)
    healthy = db_status == "healthy"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": container.settings.app.version,
        "environment": container.settings.app_env,
        "uptime_seconds": round(time.time() - container.started_at, 1),
        "checks": {
            "database": {"status": db_status, "product_count": product_count},
            "memory": {"max_rss_mb": _max_rss_mb()},
            "caches": {cache.name: len(cache) for cache in container.caches.all()},
            "response_time_ms": response_time_ms,
        },
    }

    logger.info(
        "health.checked",
        extra={"db_status": db_status, "product_count": product_count, "response_time_ms": response_time_ms},
    )
    return JSONResponse(body, status_code=200 if healthy else 503)
