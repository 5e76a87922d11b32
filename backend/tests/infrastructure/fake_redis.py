"""In-memory async stand-in for redis.asyncio.Redis.

Covers only the commands RedisCacheClient issues. PX expiry is evaluated
against an injectable clock so TTL tests never sleep.
"""

import fnmatch

from redis.exceptions import ConnectionError as RedisConnectionError


class FakeClock:
    """Mutable wall clock in seconds."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    def __init__(self, clock: FakeClock | None = None, honor_px: bool = True):
        self.clock = clock or FakeClock()
        self.honor_px = honor_px
        self.store: dict[str, tuple[str, float | None]] = {}
        self.calls: list[tuple] = []
        self.fail = False
        self.closed = False

    def _check(self, command: str) -> None:
        self.calls.append((command,))
        if self.fail:
            raise RedisConnectionError("Connection refused")

    def _alive(self, key: str) -> bool:
        entry = self.store.get(key)
        if entry is None:
            return False
        _, expires_at = entry
        if expires_at is not None and self.clock() >= expires_at:
            del self.store[key]
            return False
        return True

    async def ping(self) -> bool:
        self._check("ping")
        return True

    async def get(self, key: str) -> str | None:
        self._check("get")
        return self.store[key][0] if self._alive(key) else None

    async def set(self, key: str, value: str, px: int | None = None) -> bool:
        self._check("set")
        expires_at = self.clock() + px / 1000 if px and self.honor_px else None
        self.store[key] = (value, expires_at)
        return True

    async def delete(self, *keys: str) -> int:
        self._check("delete")
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    async def scan_iter(self, match: str = "*", count: int | None = None):
        self._check("scan")
        for key in list(self.store):
            if fnmatch.fnmatchcase(key, match):
                yield key

    async def info(self, section: str | None = None) -> dict:
        self._check("info")
        return {"used_memory_human": "1.02M"}

    async def aclose(self) -> None:
        self.closed = True
