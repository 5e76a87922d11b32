"""Listing Filters — FilterCriteria → Query Builder predicates and sort terms.

Invariants:
    - normalize_filters() never mutates its input; returns a new dict
    - Values meaning "no predicate" are dropped: None, "" and the default sort
      everywhere, "any" only for enum-valued filters (search text is literal),
      so semantically equal criteria normalize to equal dicts
    - apply_filters() adds predicates only; ordering is apply_sort()'s job
    - Two price bounds on one column go through and_() (builder is last-write-wins)

Design Decisions:
    - Filters stay a plain dict end-to-end: the same object is fingerprinted,
      mapped to REST predicates and logged
"""

from catalog.core.domain_types import SortOrder, VerificationFilter
from catalog.core.query_builder import QueryBuilder

PRICE_COLUMN = "price_diamonds"

_EQ_COLUMNS = ("category", "biome", "direction")
_ANY = "any"


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _is_unset(value: object) -> bool:
    """Blank, or the "any" sentinel of an enum-valued filter."""
    return _is_blank(value) or value == _ANY


def normalize_filters(filters: dict | None) -> dict:
    """Canonical FilterCriteria: blank values dropped, search trimmed."""
    normalized: dict = {}
    for key, value in (filters or {}).items():
        if key == "price_range":
            bounds = {
                k: v for k, v in (value or {}).items()
                if k in ("min", "max") and v is not None
            }
            if bounds:
                normalized[key] = bounds
            continue
        if key == "sort_by" and value == SortOrder.PRICE_DESC.value:
            continue
        unset = _is_blank(value) if key == "search" else _is_unset(value)
        if unset:
            continue
        normalized[key] = value.strip() if key == "search" else value
    return normalized


def apply_filters(builder: QueryBuilder, filters: dict) -> QueryBuilder:
    """Add every predicate named in filters to builder (mutates and returns it)."""
    search = filters.get("search")
    if not _is_blank(search):
        builder.ilike("name", f"*{search.strip()}*")

    for column in _EQ_COLUMNS:
        value = filters.get(column)
        if not _is_unset(value):
            builder.eq(column, value)

    _apply_price_range(builder, filters.get("price_range") or {})

    verification = filters.get("verification")
    if verification == VerificationFilter.VERIFIED.value:
        builder.is_not_null("last_verified")
    elif verification == VerificationFilter.UNVERIFIED.value:
        builder.is_null("last_verified")
    return builder


def _apply_price_range(builder: QueryBuilder, price_range: dict) -> None:
    low, high = price_range.get("min"), price_range.get("max")
    if low is not None and high is not None:
        builder.and_([f"{PRICE_COLUMN}.gte.{low}", f"{PRICE_COLUMN}.lte.{high}"])
    elif low is not None:
        builder.gte(PRICE_COLUMN, low)
    elif high is not None:
        builder.lte(PRICE_COLUMN, high)


def apply_sort(builder: QueryBuilder, sort_by: str | None) -> QueryBuilder:
    """Append the sort term for sort_by; unknown/missing → price descending."""
    if sort_by == SortOrder.PRICE_ASC.value:
        return builder.order(PRICE_COLUMN, ascending=True)
    if sort_by == SortOrder.NAME_ASC.value:
        return builder.order("name", ascending=True)
    if sort_by == SortOrder.RECENT.value:
        return builder.order("created_at", ascending=False)
    if sort_by == SortOrder.VERIFIED_FIRST.value:
        return builder.order("last_verified", ascending=False, nulls_last=True)
    return builder.order(PRICE_COLUMN, ascending=False)
