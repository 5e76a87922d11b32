"""Route Tests: listings, cache admin and health endpoints over ASGITransport."""

from httpx import ASGITransport, AsyncClient

from catalog.main import app


async def test_list_listings_returns_aggregate(client, upstream):
    response = await client.get("/api/v1/listings", params={"category": "tools"})
    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total_items"] == 57
    assert body["all_items"][0]["_links"]["self"]["href"] == "/api/data/public_items?id=eq.1"
    assert len(upstream.requests) == 5
    assert all(r.url.params["category"] == "eq.tools" for r in upstream.requests)


async def test_list_listings_maps_price_params(client, upstream):
    response = await client.get(
        "/api/v1/listings", params={"min_price": 1, "max_price": 9, "sort_by": "name_asc"},
    )
    assert response.status_code == 200
    page = next(r for r in upstream.requests if upstream.classify(r) == "page")
    assert page.url.params["and"] == "(price_diamonds.gte.1.0,price_diamonds.lte.9.0)"
    assert page.url.params["order"] == "name.asc"


async def test_second_request_is_served_from_cache(client, upstream):
    await client.get("/api/v1/listings", params={"page": 2})
    await app.state.orchestrator.flush()
    response = await client.get("/api/v1/listings", params={"page": 2})
    assert response.status_code == 200
    assert response.json()["pagination"]["current_page"] == 2
    assert len(upstream.requests) == 5


async def test_upstream_failure_returns_fallback_200(client, upstream):
    upstream.fail_query = "page"
    response = await client.get("/api/v1/listings", params={"items_per_page": 50})
    assert response.status_code == 200
    assert response.json()["pagination"] == {
        "current_page": 1, "total_pages": 0, "items_per_page": 50, "total_items": 0,
    }


async def test_invalid_params_return_400(client, upstream):
    response = await client.get("/api/v1/listings", params={"biome": "moon"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    response = await client.get("/api/v1/listings", params={"items_per_page": 500})
    assert response.status_code == 400

    response = await client.get("/api/v1/listings", params={"min_price": 10, "max_price": 1})
    assert response.status_code == 400
    assert upstream.requests == []


async def test_cache_stats_and_clear(client, fake_redis):
    await client.get("/api/v1/listings")
    await app.state.orchestrator.flush()
    fake_redis.store["unrelated"] = ("x", None)

    stats = (await client.get("/api/v1/cache/stats")).json()
    assert stats == {"connected": True, "key_count": 1, "memory": "1.02M"}

    response = await client.delete("/api/v1/cache")
    assert response.status_code == 200
    assert response.json() == {"removed": 1}
    assert set(fake_redis.store) == {"unrelated"}


async def test_cache_stats_when_cache_down(client, fake_redis):
    fake_redis.fail = True
    response = await client.get("/api/v1/cache/stats")
    assert response.status_code == 200
    assert response.json()["connected"] is False


async def test_liveness(client):
    response = await client.get("/api/v1/health/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_readiness_reports_degraded_cache(client, fake_redis):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"] == {"gateway": "healthy", "cache": "healthy"}

    fake_redis.fail = True
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["checks"]["cache"] == "degraded"


async def test_readiness_fails_when_gateway_down(client, upstream):
    upstream.fail_query = "page"
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503
    assert response.json()["reason"] == "gateway_unavailable"


async def test_cache_clear_when_cache_down_returns_503_envelope(client, fake_redis):
    fake_redis.fail = True
    response = await client.delete("/api/v1/cache")
    assert response.status_code == 503
    error = response.json()["error"]
    assert error["code"] == "CACHE_UNAVAILABLE"
    assert error["category"] == "cache"
    assert error["severity"] == "warning"
    assert "timestamp" in error


async def test_unexpected_error_returns_generic_500(client):
    class _BrokenOrchestrator:
        async def load(self, *args, **kwargs):
            raise RuntimeError("secret connection string")

    app.state.orchestrator = _BrokenOrchestrator()
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        response = await c.get("/api/v1/listings")

    assert response.status_code == 500
    assert response.json() == {
        "error": {
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "category": "internal",
            "severity": "critical",
        },
    }
