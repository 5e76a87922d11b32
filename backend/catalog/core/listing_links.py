"""Listing Links — viewer-dependent HATEOAS link sets for enhanced items.

Invariants:
    - "self" is always present
    - "copy_warp" only when the item has a warp command
    - "edit"/"update_stock" only for an authenticated viewer who owns the item
    - "report_price" only for an authenticated viewer
    - "verify" only for an authenticated viewer holding VERIFY_PRICES
    - Links are never part of a cached aggregate; with_links() is applied per
      request on a copy, after a cache hit or miss alike
"""

import copy
from dataclasses import dataclass, field

from catalog.core.domain_types import Permission

_ITEM_LISTS = ("featured_items", "all_items")


@dataclass(frozen=True)
class ViewerContext:
    """Who is looking at the listings. Defaults to an anonymous viewer."""
    is_authenticated: bool = False
    username: str | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)
    owned_item_ids: frozenset[str] = field(default_factory=frozenset)


ANONYMOUS = ViewerContext()


def generate_links(item: dict, viewer: ViewerContext = ANONYMOUS) -> dict:
    """Build the link set for one enhanced item as seen by viewer."""
    item_id = item["id"]
    links: dict = {"self": {"href": f"/api/data/public_items?id=eq.{item_id}"}}

    location = item.get("location") or {}
    if location.get("warp_command"):
        links["copy_warp"] = {
            "href": "/api/v1/warp/copy", "method": "POST",
            "title": "Copy warp command",
        }

    if not viewer.is_authenticated:
        return links

    if str(item_id) in viewer.owned_item_ids:
        links["edit"] = {
            "href": f"/api/internal/items/{item_id}", "method": "PUT",
            "title": "Edit listing", "requires_auth": True,
        }
        links["update_stock"] = {
            "href": f"/api/internal/items/{item_id}/stock", "method": "PATCH",
            "title": "Update stock", "requires_auth": True,
        }

    links["report_price"] = {
        "href": "/api/v1/reports/price", "method": "POST",
        "title": "Report price change", "requires_auth": True,
    }

    if Permission.VERIFY_PRICES.value in viewer.permissions:
        links["verify"] = {
            "href": f"/api/v1/items/{item_id}/verify", "method": "PATCH",
            "title": "Verify current price", "requires_auth": True,
            "permission": Permission.VERIFY_PRICES.value,
        }
    return links


def with_links(aggregate: dict, viewer: ViewerContext = ANONYMOUS) -> dict:
    """Copy of aggregate with "_links" on every item, category previews included."""
    result = copy.deepcopy(aggregate)
    for list_name in _ITEM_LISTS:
        for item in result.get(list_name, []):
            item["_links"] = generate_links(item, viewer)
    for category in result.get("categories", []):
        for item in category.get("top_items", []):
            item["_links"] = generate_links(item, viewer)
    return result
