"""Query Result Cache — best-effort cache-aside wrapper over the cache client.

Invariants:
    - get() returns None on a miss AND on any backend failure (callers cannot tell)
    - set()/clear() never raise; failures are logged and dropped
    - set() with ttl_ms=None uses the default TTL; ttl_ms <= 0 stores nothing
    - stats() returns {"connected": False} instead of raising; key_count covers
      this cache's namespace only
    - clear() without a key removes only this cache's namespace
    - purge() is the strict form of clear(): it raises CacheUnavailableError so
      an operator learns the invalidation did not happen

Design Decisions:
    - The cache is a pure performance optimization: every caller must already
      work at full correctness against the gateway with the cache down
"""

import logging
from typing import Any

from catalog.core.errors import CacheUnavailableError
from catalog.infrastructure.cache_client import RedisCacheClient

logger = logging.getLogger(__name__)


class QueryResultCache:
    """Namespaced get/set/clear/stats that degrade to miss/no-op."""

    def __init__(
        self,
        client: RedisCacheClient,
        namespace: str = "marketplace:query",
        default_ttl_ms: int = 30_000,
    ):
        self.client = client
        self.namespace = namespace
        self.default_ttl_ms = default_ttl_ms

    @property
    def key_pattern(self) -> str:
        return f"{self.namespace}:*"

    async def get(self, key: str) -> Any | None:
        try:
            return await self.client.get(key)
        except CacheUnavailableError as e:
            logger.warning(
                f"Cache GET degraded to miss: {e.message}",
                extra={"cache_key": key, "operation": e.operation},
            )
        except Exception as e:
            logger.error(
                f"Unexpected cache GET error: {e}", exc_info=True,
                extra={"cache_key": key},
            )
        return None

    async def set(self, key: str, value: Any, ttl_ms: int | None = None) -> None:
        ttl = self.default_ttl_ms if ttl_ms is None else ttl_ms
        if ttl <= 0:
            logger.debug("Cache SET skipped: non-positive TTL", extra={"cache_key": key})
            return
        try:
            await self.client.set(key, value, ttl)
        except CacheUnavailableError as e:
            logger.warning(
                f"Cache SET skipped: {e.message}",
                extra={"cache_key": key, "operation": e.operation},
            )
        except Exception as e:
            logger.error(
                f"Unexpected cache SET error: {e}", exc_info=True,
                extra={"cache_key": key},
            )

    async def clear(self, key: str | None = None) -> None:
        """Invalidate one key, or every key under the namespace."""
        try:
            if key is not None:
                await self.client.delete(key)
            else:
                await self.purge()
        except CacheUnavailableError as e:
            logger.warning(
                f"Cache CLEAR skipped: {e.message}",
                extra={"cache_key": key, "operation": e.operation},
            )
        except Exception as e:
            logger.error(f"Unexpected cache CLEAR error: {e}", exc_info=True)

    async def purge(self) -> int:
        """Delete every key under the namespace; raises CacheUnavailableError."""
        removed = await self.client.delete_pattern(self.key_pattern)
        logger.info(
            f"Cleared {removed} cached queries", extra={"item_count": removed},
        )
        return removed

    async def stats(self) -> dict:
        try:
            return await self.client.info(self.key_pattern)
        except CacheUnavailableError as e:
            logger.warning(f"Cache STATS unavailable: {e.message}")
        except Exception as e:
            logger.error(f"Unexpected cache STATS error: {e}", exc_info=True)
        return {"connected": False}

    async def ping(self) -> bool:
        return await self.client.ping()
