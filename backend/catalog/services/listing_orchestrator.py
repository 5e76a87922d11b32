"""Listing Data Orchestrator — cache-aside loading of filtered, enhanced listing pages.

Invariants:
    - Per request: CACHE_LOOKUP → HIT → RETURN
                  | MISS → FETCH → TRANSFORM → ASSEMBLE → CACHE_WRITE (background) → RETURN
                  | FETCH_ERROR → RETURN_FALLBACK
    - The cache key depends only on (normalized filters, page, items_per_page)
    - Cached aggregates are viewer-agnostic; links are applied per request afterwards
    - load() never raises for upstream or cache failures; the empty fallback
      aggregate is returned instead and is never cached
    - The caller's filters dict is never mutated

Design Decisions:
    - Five sub-queries fan out with asyncio.gather from one filtered base builder
    - No single-flight: concurrent misses on one key each fetch upstream, and the
      last cache write wins
    - Cache writes run as background tasks; flush() awaits them (shutdown, tests)
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from catalog.core.cache_keys import QUERY_NAMESPACE, query_cache_key
from catalog.core.domain_types import ConfidenceLevel
from catalog.core.errors import UpstreamQueryError
from catalog.core.listing_aggregate import (
    PageRequest, assemble_aggregate, empty_aggregate,
)
from catalog.core.listing_filters import (
    PRICE_COLUMN, apply_filters, apply_sort, normalize_filters,
)
from catalog.core.listing_links import ANONYMOUS, ViewerContext, with_links
from catalog.core.listing_transform import transform_rows
from catalog.core.query_builder import QueryBuilder
from catalog.core.repository_protocols import ListingGateway, QueryCache

logger = logging.getLogger(__name__)

FEATURED_LIMIT = 6
DEFAULT_TTL_MS = 30_000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ListingDataOrchestrator:
    """Answers "page N of filtered listings plus aggregate stats" through the cache."""

    def __init__(
        self,
        cache: QueryCache,
        gateway: ListingGateway,
        resource: str = "public_items",
        namespace: str = QUERY_NAMESPACE,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.cache = cache
        self.gateway = gateway
        self.resource = resource
        self.namespace = namespace
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._pending_writes: set[asyncio.Task] = set()

    async def load(
        self,
        filters: dict | None = None,
        page: int = 1,
        items_per_page: int = 20,
        viewer: ViewerContext = ANONYMOUS,
    ) -> dict:
        """Aggregate for one page of listings, with links for viewer."""
        criteria = normalize_filters(filters)
        request = PageRequest(page=page, items_per_page=items_per_page)
        key = query_cache_key(self.namespace, criteria, page, items_per_page)

        cached = await self.cache.get(key)
        if cached is not None:
            logger.info("Listing cache HIT", extra={"cache_key": key})
            return with_links(cached, viewer)

        logger.info("Listing cache MISS", extra={"cache_key": key})
        try:
            aggregate = await self._build_aggregate(criteria, request)
        except UpstreamQueryError as e:
            logger.error(
                f"Listing fetch failed, serving fallback: {e.message}",
                extra={
                    "cache_key": key, "query_name": e.query_name,
                    "error_code": e.code, "status_code": e.status_code,
                },
            )
            return with_links(empty_aggregate(request), viewer)
        except Exception as e:
            logger.error(
                f"Listing assembly failed, serving fallback: {e}",
                exc_info=True, extra={"cache_key": key},
            )
            return with_links(empty_aggregate(request), viewer)

        self._schedule_write(key, aggregate)
        logger.info(
            "Listing aggregate built",
            extra={"cache_key": key, "item_count": len(aggregate["all_items"])},
        )
        return with_links(aggregate, viewer)

    async def invalidate(self, filters: dict | None, page: int, items_per_page: int) -> None:
        """Drop the cached aggregate for one request shape."""
        key = query_cache_key(
            self.namespace, normalize_filters(filters), page, items_per_page,
        )
        await self.cache.clear(key)

    async def flush(self) -> None:
        """Wait for in-flight background cache writes."""
        if self._pending_writes:
            await asyncio.gather(*self._pending_writes, return_exceptions=True)

    # ─── Fetch / assemble ────────────────────────────────────────

    def build_queries(self, criteria: dict, request: PageRequest) -> dict[str, QueryBuilder]:
        """The five sub-queries, keyed by name, all cloned from one filtered base."""
        base = apply_filters(self.gateway.query(self.resource), criteria)

        page_query = apply_sort(base.clone(), criteria.get("sort_by"))
        page_query.limit(request.limit).offset(request.offset)

        featured_query = (
            base.clone()
            .neq("confidence_level", ConfidenceLevel.LOW.value)
            .order(PRICE_COLUMN, ascending=False)
            .limit(FEATURED_LIMIT)
        )
        return {
            "page": page_query,
            "featured": featured_query,
            "count": base.clone().select("id"),
            "shops": base.clone().select("owner_shop_name"),
            "categories": base.clone().select("category"),
        }

    async def _build_aggregate(self, criteria: dict, request: PageRequest) -> dict:
        queries = self.build_queries(criteria, request)
        page_rows, featured_rows, total_items, shop_rows, category_rows = await asyncio.gather(
            self.gateway.fetch_rows(queries["page"], "page"),
            self.gateway.fetch_rows(queries["featured"], "featured"),
            self.gateway.count_rows(queries["count"], "count"),
            self.gateway.fetch_rows(queries["shops"], "shops"),
            self.gateway.fetch_rows(queries["categories"], "categories"),
        )
        return assemble_aggregate(
            page_items=transform_rows(page_rows),
            featured_items=transform_rows(featured_rows[:FEATURED_LIMIT]),
            total_items=total_items,
            shop_rows=shop_rows,
            category_rows=category_rows,
            request=request,
            now=self._clock(),
        )

    def _schedule_write(self, key: str, aggregate: dict) -> None:
        task = asyncio.create_task(self.cache.set(key, aggregate, self.ttl_ms))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)
