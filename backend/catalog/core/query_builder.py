"""Query Builder — fluent, resource-scoped PostgREST query construction.

Invariants:
    - Every filter method sets/overwrites ONE key (last write wins per column)
    - order() appends; multiple calls give a multi-column sort in call order
    - limit/offset are absent unless called (defaults belong to the caller)
    - build_url() parameter order: select, filters (insertion order), order, limit, offset
    - clone() shares no mutable state with the original
    - in_() double-quotes list items containing , ( ) " or a backslash so each value stays
      one list element
    - No validation: malformed values are the caller's responsibility

Design Decisions:
    - Operators are suffix-encoded into the value ("eq.V", "in.(a,b)") at call
      time, so rendering is a plain walk over the stored mapping
    - PostgREST structural characters (, . ( ) * :) stay unescaped in rendered
      values so golden URLs are readable and stable
"""

from collections.abc import Iterable
from urllib.parse import quote

_SAFE_CHARS = ",.()*:"
_LIST_RESERVED = ',()"\\'


def _format_value(value: object) -> str:
    """Render a scalar the way PostgREST expects it in a filter."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


def _format_list_item(value: object) -> str:
    """List element for in.(...); double-quoted when it holds , ( ) " or \\."""
    text = _format_value(value)
    if not any(c in text for c in _LIST_RESERVED):
        return text
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class QueryBuilder:
    """Accumulates select/filter/order/limit/offset for one REST resource."""

    def __init__(self, base_url: str, resource: str):
        self.base_url = base_url.rstrip("/")
        self.resource = resource
        self.selected_fields: list[str] = []
        self.filters: dict[str, str] = {}
        self.order_by: list[str] = []
        self.limit_value: int | None = None
        self.offset_value: int | None = None

    # ─── Projection ──────────────────────────────────────────────

    def select(self, fields: str | list[str]) -> "QueryBuilder":
        """Replace the selected field list (does not merge with prior calls)."""
        if isinstance(fields, str):
            self.selected_fields = [fields]
        else:
            self.selected_fields = list(fields)
        return self

    # ─── Filters ─────────────────────────────────────────────────

    def eq(self, column: str, value: object) -> "QueryBuilder":
        self.filters[column] = f"eq.{_format_value(value)}"
        return self

    def neq(self, column: str, value: object) -> "QueryBuilder":
        self.filters[column] = f"neq.{_format_value(value)}"
        return self

    def gt(self, column: str, value: float) -> "QueryBuilder":
        self.filters[column] = f"gt.{_format_value(value)}"
        return self

    def gte(self, column: str, value: float) -> "QueryBuilder":
        self.filters[column] = f"gte.{_format_value(value)}"
        return self

    def lt(self, column: str, value: float) -> "QueryBuilder":
        self.filters[column] = f"lt.{_format_value(value)}"
        return self

    def lte(self, column: str, value: float) -> "QueryBuilder":
        self.filters[column] = f"lte.{_format_value(value)}"
        return self

    def ilike(self, column: str, pattern: str) -> "QueryBuilder":
        """Case-insensitive match; pattern may contain * wildcards."""
        self.filters[column] = f"ilike.{pattern}"
        return self

    def contains(self, column: str, value: object) -> "QueryBuilder":
        self.filters[column] = f"cs.{_format_value(value)}"
        return self

    def in_(self, column: str, values: Iterable[object]) -> "QueryBuilder":
        joined = ",".join(_format_list_item(v) for v in values)
        self.filters[column] = f"in.({joined})"
        return self

    def is_null(self, column: str) -> "QueryBuilder":
        self.filters[column] = "is.null"
        return self

    def is_not_null(self, column: str) -> "QueryBuilder":
        self.filters[column] = "not.is.null"
        return self

    def and_(self, conditions: Iterable[str]) -> "QueryBuilder":
        """PostgREST logical AND, e.g. ["price.gte.1", "price.lte.9"].

        The only way to put two predicates on one column; stored under the
        "and" key so a second call replaces the first.
        """
        self.filters["and"] = f"({','.join(conditions)})"
        return self

    # ─── Ordering & paging ───────────────────────────────────────

    def order(
        self, column: str, ascending: bool = True, nulls_last: bool = False,
    ) -> "QueryBuilder":
        term = f"{column}.{'asc' if ascending else 'desc'}"
        if nulls_last:
            term += ".nullslast"
        self.order_by.append(term)
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self.limit_value = count
        return self

    def offset(self, count: int) -> "QueryBuilder":
        self.offset_value = count
        return self

    # ─── Rendering ───────────────────────────────────────────────

    def params(self) -> list[tuple[str, str]]:
        """Ordered (name, value) pairs in the fixed rendering order."""
        params: list[tuple[str, str]] = []
        if self.selected_fields:
            params.append(("select", ",".join(self.selected_fields)))
        params.extend(self.filters.items())
        if self.order_by:
            params.append(("order", ",".join(self.order_by)))
        if self.limit_value is not None:
            params.append(("limit", str(self.limit_value)))
        if self.offset_value is not None:
            params.append(("offset", str(self.offset_value)))
        return params

    def build_endpoint(self) -> str:
        """Resource path plus query string, without the base URL."""
        query = "&".join(
            f"{quote(name, safe='')}={quote(value, safe=_SAFE_CHARS)}"
            for name, value in self.params()
        )
        path = f"/{self.resource}"
        return f"{path}?{query}" if query else path

    def build_url(self) -> str:
        return f"{self.base_url}{self.build_endpoint()}"

    def clone(self) -> "QueryBuilder":
        """Independent copy: mutating the clone never affects the original."""
        cloned = QueryBuilder(self.base_url, self.resource)
        cloned.selected_fields = list(self.selected_fields)
        cloned.filters = dict(self.filters)
        cloned.order_by = list(self.order_by)
        cloned.limit_value = self.limit_value
        cloned.offset_value = self.offset_value
        return cloned

    def __repr__(self) -> str:
        return f"QueryBuilder({self.build_endpoint()!r})"
