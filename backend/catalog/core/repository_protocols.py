"""Boundary Protocols — contracts between the orchestrator and its IO collaborators.

Invariants:
    - Services depend on these Protocols, never on redis or httpx directly
    - QueryCache methods never raise; ListingGateway methods raise UpstreamQueryError

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
"""

from typing import Any, Protocol

from catalog.core.query_builder import QueryBuilder


class QueryCache(Protocol):
    """Best-effort cache-aside storage — implemented by infrastructure.query_cache."""
    async def get(self, key: str) -> Any | None: ...
    async def set(self, key: str, value: Any, ttl_ms: int | None = None) -> None: ...
    async def clear(self, key: str | None = None) -> None: ...
    async def stats(self) -> dict: ...


class ListingGateway(Protocol):
    """REST data gateway — implemented by infrastructure.gateway_client."""
    def query(self, resource: str) -> QueryBuilder: ...
    async def fetch_rows(self, builder: QueryBuilder, query_name: str) -> list[dict]: ...
    async def count_rows(self, builder: QueryBuilder, query_name: str) -> int: ...
