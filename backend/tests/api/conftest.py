"""Route test fixtures — the real app with fakes installed on app.state.

Invariants:
    - ASGITransport does not run the lifespan, so nothing touches a real
      redis or gateway; the fixture installs fakes where the lifespan would
    - app.state is restored after each test
"""

from datetime import datetime, timezone

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from catalog.infrastructure.cache_client import RedisCacheClient
from catalog.infrastructure.gateway_client import RestGatewayClient
from catalog.infrastructure.query_cache import QueryResultCache
from catalog.main import app
from catalog.services.listing_orchestrator import ListingDataOrchestrator

from tests.infrastructure.fake_redis import FakeClock, FakeRedis
from tests.services.fake_upstream import FakeUpstream

_STATE_KEYS = ("query_cache", "gateway", "orchestrator")


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def fake_redis():
    return FakeRedis(FakeClock())


@pytest.fixture
async def client(upstream, fake_redis):
    """FastAPI test client with fake cache and gateway on app.state."""
    gateway = RestGatewayClient(
        "http://gateway.test", max_retries=0, base_delay_ms=0,
        transport=httpx.MockTransport(upstream),
    )
    query_cache = QueryResultCache(
        RedisCacheClient(client=fake_redis, clock=fake_redis.clock),
    )
    orchestrator = ListingDataOrchestrator(
        query_cache, gateway,
        clock=lambda: datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc),
    )
    original = {k: getattr(app.state, k, None) for k in _STATE_KEYS}
    app.state.query_cache = query_cache
    app.state.gateway = gateway
    app.state.orchestrator = orchestrator

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    await orchestrator.flush()
    await gateway.aclose()
    for key, value in original.items():
        setattr(app.state, key, value)
