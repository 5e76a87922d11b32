"""Marketplace Catalog API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CatalogError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Cache client, gateway client and orchestrator are built in the lifespan
      and live on app.state; shutdown drains pending cache writes first

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - The app starts with the cache unreachable; it serves uncached until
      redis-py reconnects
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog.api.error_handlers import register_error_handlers
from catalog.api.routes import cache, health, listings
from catalog.config import get_settings
from catalog.infrastructure.cache_client import RedisCacheClient
from catalog.infrastructure.gateway_client import RestGatewayClient
from catalog.infrastructure.observability import setup_logging
from catalog.infrastructure.query_cache import QueryResultCache
from catalog.services.listing_orchestrator import ListingDataOrchestrator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    cache_client = RedisCacheClient(
        host=settings.cache_host,
        port=settings.cache_port,
        password=settings.cache_password,
        db=settings.cache_db,
        max_retries=settings.cache_max_retries,
        retry_delay_ms=settings.cache_retry_delay_ms,
        socket_timeout_seconds=settings.cache_socket_timeout_seconds,
    )
    await cache_client.connect()
    query_cache = QueryResultCache(
        cache_client,
        namespace=settings.cache_namespace,
        default_ttl_ms=settings.cache_default_ttl_ms,
    )
    gateway = RestGatewayClient(
        settings.gateway_url,
        timeout_seconds=settings.gateway_timeout_seconds,
        max_retries=settings.gateway_max_retries,
        base_delay_ms=settings.gateway_base_delay_ms,
        max_delay_ms=settings.gateway_max_delay_ms,
    )
    orchestrator = ListingDataOrchestrator(
        query_cache,
        gateway,
        resource=settings.listing_resource,
        namespace=settings.cache_namespace,
        ttl_ms=settings.cache_default_ttl_ms,
    )

    app.state.query_cache = query_cache
    app.state.gateway = gateway
    app.state.orchestrator = orchestrator
    logger.info("Marketplace Catalog API started")
    yield
    logger.info("Marketplace Catalog API shutting down")
    await orchestrator.flush()
    await cache_client.disconnect()
    await gateway.aclose()


app = FastAPI(
    title="Marketplace Catalog API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(listings.router)
app.include_router(cache.router)

register_error_handlers(app)
