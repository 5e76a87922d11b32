"""Tests for the CatalogError hierarchy — codes, statuses, REST envelope."""

from catalog.core.errors import (
    CacheUnavailableError, ErrorContext, UpstreamQueryError,
)


def test_upstream_error_envelope_carries_query_context():
    exc = UpstreamQueryError(
        "HTTP 500", "count", status_code=500,
        context=ErrorContext(resource="public_items"),
    )
    body = exc.to_response()["error"]
    assert exc.http_status == 502
    assert body["code"] == "UPSTREAM_QUERY_FAILED"
    assert body["category"] == "external_api"
    assert body["severity"] == "critical"
    assert body["message"] == "Upstream query 'count' failed: HTTP 500"
    assert body["context"] == {"query_name": "count", "resource": "public_items"}


def test_cache_error_names_operation():
    exc = CacheUnavailableError("Connection refused", "get", ErrorContext(cache_key="k"))
    assert exc.operation == "get"
    assert exc.http_status == 503
    assert exc.message == "Cache get failed: Connection refused"
    assert exc.to_response()["error"]["context"] == {"query_name": None, "resource": None}
