"""REST Gateway Client — httpx.AsyncClient over PostgREST with retry, backoff, and error mapping.

Invariants:
    - Transient failures (5xx, connection errors): max_retries retries with exponential backoff
    - Client errors (4xx) and timeouts: immediate failure, no retry
    - Every failure is raised as UpstreamQueryError carrying the sub-query name
    - fetch_rows() always returns a list of row dicts (non-array bodies are errors)

Design Decisions:
    - Builders render the endpoint; the client owns base URL, timeout and headers
    - ±25% jitter on backoff so concurrent requests do not retry in lockstep
    - count_rows() asks for an exact count (Prefer: count=exact) and reads
      Content-Range; a gateway that omits the header falls back to len(rows)
"""

import asyncio
import logging
import random

import httpx

from catalog.core.errors import ErrorContext, UpstreamQueryError
from catalog.core.query_builder import QueryBuilder

logger = logging.getLogger(__name__)


def parse_content_range(value: str | None) -> int | None:
    """Total from a Content-Range header ("0-19/100" → 100, "*/0" → 0)."""
    if not value or "/" not in value:
        return None
    total = value.rsplit("/", 1)[1].strip()
    return int(total) if total.isdigit() else None


class RestGatewayClient:
    """Executes QueryBuilder queries against the REST data gateway."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        max_retries: int = 2,
        base_delay_ms: int = 200,
        max_delay_ms: int = 2_000,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def query(self, resource: str) -> QueryBuilder:
        """Fresh builder scoped to resource on this gateway."""
        return QueryBuilder(self.base_url, resource)

    async def fetch_rows(self, builder: QueryBuilder, query_name: str) -> list[dict]:
        response = await self._get(builder, query_name)
        rows = self._decode_rows(response, builder, query_name)
        logger.debug(
            f"Gateway '{query_name}' returned {len(rows)} rows",
            extra={"query_name": query_name, "item_count": len(rows)},
        )
        return rows

    async def count_rows(self, builder: QueryBuilder, query_name: str) -> int:
        response = await self._get(
            builder, query_name, headers={"Prefer": "count=exact"},
        )
        total = parse_content_range(response.headers.get("content-range"))
        if total is not None:
            return total
        return len(self._decode_rows(response, builder, query_name))

    async def health_check(self) -> bool:
        """Gateway reachability (for readiness probes). Never raises."""
        try:
            response = await self.client.get("/")
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.error(f"Gateway health check failed: {e}")
            return False

    async def aclose(self) -> None:
        await self.client.aclose()

    # ─── Internals ───────────────────────────────────────────────

    async def _get(
        self, builder: QueryBuilder, query_name: str, headers: dict | None = None,
    ) -> httpx.Response:
        """GET with retry on transient failures."""
        endpoint = builder.build_endpoint()
        context = ErrorContext(query_name=query_name, resource=builder.resource)
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.get(endpoint, headers=headers)
            except httpx.TimeoutException:
                raise UpstreamQueryError("gateway timeout", query_name, context=context)
            except httpx.TransportError as e:
                await self._handle_transient_error(e, attempt, query_name, context)
                continue

            if response.status_code >= 500:
                await self._handle_transient_error(
                    f"HTTP {response.status_code}", attempt, query_name, context,
                    status_code=response.status_code,
                )
                continue
            if response.status_code >= 400:
                raise UpstreamQueryError(
                    f"HTTP {response.status_code}: {response.text[:200]}",
                    query_name, status_code=response.status_code, context=context,
                )
            return response

    def _decode_rows(
        self, response: httpx.Response, builder: QueryBuilder, query_name: str,
    ) -> list[dict]:
        try:
            rows = response.json()
        except ValueError as e:
            raise UpstreamQueryError(
                f"invalid JSON body: {e}", query_name,
                status_code=response.status_code,
                context=ErrorContext(resource=builder.resource),
            )
        if not isinstance(rows, list):
            raise UpstreamQueryError(
                "expected a JSON array", query_name,
                status_code=response.status_code,
                context=ErrorContext(resource=builder.resource),
            )
        return rows

    async def _handle_transient_error(
        self,
        error: object,
        attempt: int,
        query_name: str,
        context: ErrorContext,
        status_code: int | None = None,
    ) -> None:
        """Sleep before the next attempt, or raise once retries are exhausted."""
        if attempt >= self.max_retries:
            raise UpstreamQueryError(
                f"transient failure after {self.max_retries} retries: {error}",
                query_name, status_code=status_code, context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"Gateway '{query_name}' transient error, retry after {delay}ms: {error}",
            extra={"query_name": query_name, "attempt": attempt + 1, "status_code": status_code},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311
