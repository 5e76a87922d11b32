"""Cache Client — redis-py asyncio client for a Valkey/Redis backend with expiring entries.

Invariants:
    - Explicit lifecycle: connect() on startup, disconnect() on shutdown
    - connect() never raises; an unreachable backend leaves is_connected False
    - Every redis/transport/decode failure is mapped to CacheUnavailableError
    - Stored values are {"data": ..., "expires_at": epoch_ms} envelopes, also expired
      server-side via PX, so a backend that ignores TTLs still never serves stale data
    - Pattern deletes and key counts use SCAN, never FLUSHDB/FLUSHALL or DBSIZE

Design Decisions:
    - Reconnect/backoff delegated to redis-py Retry(ExponentialBackoff) configured
      from settings (max retries, retry delay)
    - client and clock injectable: tests pass an in-memory fake and a fake clock
"""

import asyncio
import json
import logging
import time
from collections.abc import Callable
from typing import Any

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    RedisError,
    TimeoutError as RedisTimeoutError,
)

from catalog.core.errors import CacheUnavailableError, ErrorContext

logger = logging.getLogger(__name__)

_BACKEND_ERRORS = (RedisError, OSError, asyncio.TimeoutError)
_MAX_BACKOFF_SECONDS = 5.0
_SCAN_BATCH = 500


class RedisCacheClient:
    """Key/value access with TTL envelopes over redis.asyncio.Redis."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        password: str | None = None,
        db: int = 0,
        max_retries: int = 3,
        retry_delay_ms: int = 1000,
        socket_timeout_seconds: float = 2.0,
        client: Any = None,
        clock: Callable[[], float] = time.time,
    ):
        self.host = host
        self.port = port
        self.password = password
        self.db = db
        self.max_retries = max_retries
        self.retry_delay_ms = retry_delay_ms
        self.socket_timeout_seconds = socket_timeout_seconds
        self._client = client
        self._clock = clock
        self.is_connected = False

    # ─── Lifecycle ───────────────────────────────────────────────

    async def connect(self) -> bool:
        """Create the client (once) and verify connectivity with PING."""
        if self._client is None:
            self._client = redis.Redis(
                host=self.host,
                port=self.port,
                db=self.db,
                password=self.password,
                socket_timeout=self.socket_timeout_seconds,
                socket_connect_timeout=self.socket_timeout_seconds,
                retry=Retry(
                    ExponentialBackoff(
                        cap=_MAX_BACKOFF_SECONDS,
                        base=self.retry_delay_ms / 1000,
                    ),
                    self.max_retries,
                ),
                retry_on_error=[RedisConnectionError, RedisTimeoutError],
                decode_responses=True,
            )
        try:
            await self._client.ping()
            self.is_connected = True
            logger.info(f"Connected to cache at {self.host}:{self.port}/{self.db}")
        except _BACKEND_ERRORS as e:
            self.is_connected = False
            logger.warning(
                f"Cache unreachable at {self.host}:{self.port}, running without cache: {e}",
                extra={"operation": "connect"},
            )
        return self.is_connected

    async def disconnect(self) -> None:
        if self._client is None:
            return
        try:
            await self._client.aclose()
        except _BACKEND_ERRORS as e:
            logger.warning(f"Error closing cache connection: {e}")
        finally:
            self._client = None
            self.is_connected = False
            logger.info("Disconnected from cache")

    # ─── Key/value operations ────────────────────────────────────

    async def get(self, key: str) -> Any | None:
        """Value stored under key, or None if absent or expired."""
        raw = await self._call("get", key, lambda c: c.get(key))
        if raw is None:
            return None
        try:
            envelope = json.loads(raw)
            data = envelope["data"]
            expired = self._now_ms() > envelope["expires_at"]
        except (ValueError, TypeError, KeyError) as e:
            raise CacheUnavailableError(
                f"malformed payload: {e}", "decode", ErrorContext(cache_key=key),
            )
        if expired:
            await self._call("delete", key, lambda c: c.delete(key))
            return None
        return data

    async def set(self, key: str, value: Any, ttl_ms: int) -> None:
        try:
            payload = json.dumps({"data": value, "expires_at": self._now_ms() + ttl_ms})
        except (TypeError, ValueError) as e:
            raise CacheUnavailableError(
                f"unserializable value: {e}", "encode", ErrorContext(cache_key=key),
            )
        await self._call("set", key, lambda c: c.set(key, payload, px=ttl_ms))

    async def delete(self, key: str) -> int:
        return await self._call("delete", key, lambda c: c.delete(key))

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern; returns the number removed."""

        async def _scan_and_delete(client) -> int:
            removed = 0
            batch: list[str] = []
            async for key in client.scan_iter(match=pattern, count=_SCAN_BATCH):
                batch.append(key)
                if len(batch) >= _SCAN_BATCH:
                    removed += await client.delete(*batch)
                    batch = []
            if batch:
                removed += await client.delete(*batch)
            return removed

        return await self._call("clear", pattern, _scan_and_delete)

    async def info(self, pattern: str = "*") -> dict:
        """Count of keys matching pattern (SCAN) and human-readable memory usage."""

        async def _info(client) -> dict:
            key_count = 0
            async for _ in client.scan_iter(match=pattern, count=_SCAN_BATCH):
                key_count += 1
            memory = await client.info("memory")
            return {
                "connected": True,
                "key_count": key_count,
                "memory": memory.get("used_memory_human", "unknown"),
            }

        return await self._call("info", None, _info)

    async def ping(self) -> bool:
        """Connectivity probe. Never raises."""
        if self._client is None:
            return False
        try:
            self.is_connected = bool(await self._client.ping())
        except _BACKEND_ERRORS as e:
            logger.warning(f"Cache ping failed: {e}")
            self.is_connected = False
        return self.is_connected

    # ─── Internals ───────────────────────────────────────────────

    async def _call(self, operation: str, key: str | None, fn):
        """Run fn(client), mapping backend failures to CacheUnavailableError."""
        if self._client is None:
            raise CacheUnavailableError(
                "client not connected", operation, ErrorContext(cache_key=key),
            )
        try:
            result = await fn(self._client)
        except _BACKEND_ERRORS as e:
            self.is_connected = False
            raise CacheUnavailableError(
                str(e) or type(e).__name__, operation, ErrorContext(cache_key=key),
            ) from e
        self.is_connected = True
        return result

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)
