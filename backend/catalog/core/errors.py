"""Error Hierarchy — typed, categorized exceptions for catalog failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - CacheUnavailableError escapes the query cache wrapper only from purge()
      (admin path); reads, writes and clear() swallow it
    - UpstreamQueryError never escapes the listing orchestrator
    - to_response() produces the REST error envelope, no internal details

Design Decisions:
    - Single hierarchy with CatalogError base: one FastAPI handler catches all
    - ErrorContext as dataclass: carries cache key / sub-query name for logging
      without coupling errors to the logging setup
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CACHE = "cache"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cache_key: str | None = None
    query_name: str | None = None
    resource: str | None = None


class CatalogError(Exception):
    """Base exception for all catalog errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "query_name": self.context.query_name,
                    "resource": self.context.resource,
                },
            }
        }


# ─── Infrastructure Errors (500-level) ──────────────────────────

class CacheUnavailableError(CatalogError):
    """Cache backend unreachable, timed out, or returned a malformed payload."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cache {operation} failed: {message}",
            "CACHE_UNAVAILABLE", ErrorCategory.CACHE,
            ErrorSeverity.WARNING, context, 503,
        )
        self.operation = operation


class UpstreamQueryError(CatalogError):
    """REST gateway returned a non-success response or the transport failed."""
    def __init__(
        self,
        message: str,
        query_name: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.query_name = query_name
        super().__init__(
            f"Upstream query '{query_name}' failed: {message}",
            "UPSTREAM_QUERY_FAILED", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 502,
        )
        self.query_name = query_name
        self.status_code = status_code
