"""Service test fixtures — orchestrator over a fake redis and a mocked gateway.

Invariants:
    - Every test gets a fresh FakeRedis, a fixed clock and a fresh upstream log
    - The gateway is the real RestGatewayClient over httpx.MockTransport, so the
      rendered sub-query URLs are what a PostgREST server would receive
"""

from datetime import datetime, timezone

import httpx
import pytest

from catalog.infrastructure.cache_client import RedisCacheClient
from catalog.infrastructure.gateway_client import RestGatewayClient
from catalog.infrastructure.query_cache import QueryResultCache
from catalog.services.listing_orchestrator import ListingDataOrchestrator

from tests.infrastructure.fake_redis import FakeClock, FakeRedis
from tests.services.fake_upstream import FakeUpstream

FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
async def gateway(upstream):
    client = RestGatewayClient(
        "http://gateway.test", max_retries=0, base_delay_ms=0,
        transport=httpx.MockTransport(upstream),
    )
    yield client
    await client.aclose()


@pytest.fixture
def query_cache(fake_redis, clock):
    return QueryResultCache(
        RedisCacheClient(client=fake_redis, clock=clock),
        namespace="marketplace:query", default_ttl_ms=30_000,
    )


@pytest.fixture
def orchestrator(query_cache, gateway):
    return ListingDataOrchestrator(
        query_cache, gateway, ttl_ms=30_000, clock=lambda: FIXED_NOW,
    )
