"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 only if the data gateway is unreachable
    - A cache outage is reported as "degraded", never as not ready

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from
      the load balancer
    - The cache is optional for correctness, so it cannot fail readiness
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from catalog.api.dependencies import get_gateway, get_query_cache
from catalog.infrastructure.gateway_client import RestGatewayClient
from catalog.infrastructure.query_cache import QueryResultCache

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "marketplace-catalog-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(
    gateway: RestGatewayClient = Depends(get_gateway),
    cache: QueryResultCache = Depends(get_query_cache),
):
    """Readiness probe — gateway connectivity required, cache reported."""
    gateway_ok = await gateway.health_check()
    cache_ok = await cache.ping()
    checks = {
        "gateway": "healthy" if gateway_ok else "unavailable",
        "cache": "healthy" if cache_ok else "degraded",
    }
    if not gateway_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "gateway_unavailable",
                "checks": checks,
            },
        )
    return {"status": "ready", "checks": checks}
