from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.core.errors import DatabaseAppError


def test_health_reports_checks(client, product_payload) -> None:
    client.post("/api/products", json=product_payload)
    client.get("/api/products")

    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["version"] == "1.0.0"
    assert body["environment"] == "testing"
    checks = body["checks"]
    assert checks["database"] == {"status": "healthy", "product_count": 1}
    assert checks["memory"]["max_rss_mb"] > 0
    assert checks["caches"] == {"products": 1, "api": 0}
    assert checks["response_time_ms"] >= 0


def test_health_returns_503_when_store_fails(container) -> None:
    container.product_service.count = AsyncMock(
        side_effect=DatabaseAppError(code="database_error", message="Failed to count products")
    )
    client = TestClient(create_app(container))

    response = client.get("/api/health")

    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "unhealthy"
    assert body["checks"]["database"]["status"] == "unhealthy"


def test_lifespan_starts_and_stops_sweepers(container) -> None:
    with TestClient(create_app(container)) as client:
        assert client.get("/api/health").status_code == 200
        assert container.caches.products._sweeper.running is True
        assert container.admission.strict.limiter._sweeper.running is True

    assert container.caches.products._sweeper.running is False
    assert container.admission.strict.limiter._sweeper.running is False
