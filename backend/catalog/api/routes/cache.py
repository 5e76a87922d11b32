"""Cache Admin — stats and namespace-wide invalidation of cached listing queries.

Invariants:
    - GET /stats answers even when the cache backend is down (connected=false)
    - DELETE only removes keys under the query namespace; with the backend
      down it fails with the CACHE_UNAVAILABLE envelope (503), never a silent 2xx
"""

import logging

from fastapi import APIRouter, Depends

from catalog.api.dependencies import get_query_cache
from catalog.infrastructure.query_cache import QueryResultCache
from catalog.schemas.listing import CacheClearResponse, CacheStatsResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/cache", tags=["cache"])


@router.get("/stats", response_model=CacheStatsResponse)
async def cache_stats(cache: QueryResultCache = Depends(get_query_cache)):
    return await cache.stats()


@router.delete("", response_model=CacheClearResponse)
async def clear_cache(cache: QueryResultCache = Depends(get_query_cache)):
    """Invalidate every cached listing query."""
    removed = await cache.purge()
    logger.info("Listing query cache cleared via API", extra={"item_count": removed})
    return {"removed": removed}
