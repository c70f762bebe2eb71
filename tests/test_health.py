"""Tests for health check and metrics endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


@pytest.fixture
def reachable_db(monkeypatch: pytest.MonkeyPatch, db_session: AsyncSession) -> None:
    """Point the health check at the test database."""
    monkeypatch.setattr("src.main.async_session_maker", async_sessionmaker(db_session.bind))


class TestHealthCheck:
    """Tests for /health endpoint."""

    @pytest.mark.asyncio
    async def test_health_response_structure(self, client: AsyncClient, reachable_db: None):
        """Test health response has correct structure."""
        response = await client.get("/health")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert "uptime_seconds" in data
        assert data["version"] == "0.1.0"
        assert set(data["checks"]) == {"database", "redis"}

    @pytest.mark.asyncio
    async def test_healthy(self, client: AsyncClient, reachable_db: None):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_database_down_is_degraded(
        self, client: AsyncClient, monkeypatch: pytest.MonkeyPatch
    ):
        def broken_session():
            raise ConnectionRefusedError("database down")

        monkeypatch.setattr("src.main.async_session_maker", broken_session)

        response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["checks"]["database"] == {"status": "unhealthy"}

    @pytest.mark.asyncio
    async def test_redis_down_is_not_degraded(
        self, client: AsyncClient, reachable_db: None, mock_cache
    ):
        """The cache is optional; losing it is reported but not fatal."""
        mock_cache.ping.side_effect = ConnectionError("redis down")

        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["checks"]["redis"] == {"status": "unhealthy"}

    @pytest.mark.asyncio
    async def test_security_headers(self, client: AsyncClient, reachable_db: None):
        response = await client.get("/health")

        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestMetrics:
    """Tests for /metrics endpoint."""

    @pytest.mark.asyncio
    async def test_prometheus_format(self, client: AsyncClient):
        await client.get("/api/posts")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "# TYPE http_requests_total counter" in response.text
        assert 'http_requests_total{method="GET",path="/api/posts",status="200"}' in response.text

    @pytest.mark.asyncio
    async def test_slugs_share_one_route_label(self, client: AsyncClient):
        from src.utils.metrics import metrics

        labels = {"method": "GET", "path": "/api/posts/{slug}", "status": "404"}
        before = metrics.http_requests_total.get(**labels)
        series = len(metrics.http_requests_total._values)

        for i in range(5):
            await client.get(f"/api/posts/no-such-slug-{i}")

        assert metrics.http_requests_total.get(**labels) == before + 5
        assert len(metrics.http_requests_total._values) <= series + 1

    @pytest.mark.asyncio
    async def test_unmatched_paths_share_one_label(self, client: AsyncClient):
        from src.utils.metrics import UNMATCHED_ROUTE, metrics

        labels = {"method": "GET", "path": UNMATCHED_ROUTE, "status": "404"}
        before = metrics.http_requests_total.get(**labels)

        await client.get("/scan/a")
        await client.get("/scan/b")

        assert metrics.http_requests_total.get(**labels) == before + 2

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_shape(self, client: AsyncClient):
        response = await client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}


class TestMetricTypes:
    """Tests for the metric primitives."""

    def test_histogram_buckets_are_cumulative(self):
        from src.utils.metrics import Histogram

        histogram = Histogram("latency", "Latency", ("path",), buckets=(0.1, 1.0))
        histogram.observe(0.05, path="/a")
        histogram.observe(0.5, path="/a")

        lines = histogram.render()

        assert 'latency_bucket{path="/a",le="0.1"} 1' in lines
        assert 'latency_bucket{path="/a",le="1.0"} 2' in lines
        assert 'latency_bucket{path="/a",le="+Inf"} 2' in lines
        assert 'latency_count{path="/a"} 2' in lines

    def test_gauge_goes_down(self):
        from src.utils.metrics import Gauge

        gauge = Gauge("busy", "Busy workers")
        gauge.inc()
        gauge.inc()
        gauge.dec()

        assert gauge.get() == 1.0
