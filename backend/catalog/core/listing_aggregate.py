"""Listing Aggregate — pure assembly of the cached homepage/listing aggregate.

Invariants:
    - total_pages = ceil(total_items / items_per_page); 0 when there are no items
    - recent_trades = floor(total_items * 0.3)
    - Category previews hold at most CATEGORY_PREVIEW_SIZE items from the current page
    - empty_aggregate() is the only degraded shape: zero items, pages and shops
    - No clock reads: callers pass `now`

Design Decisions:
    - Aggregate is a plain JSON-native dict: cached as-is, returned as-is
"""

import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta

CATEGORY_PREVIEW_SIZE = 2
RECENT_TRADE_RATIO = 0.3


@dataclass(frozen=True)
class PageRequest:
    """1-based page request; callers guarantee page >= 1 and items_per_page >= 1."""
    page: int = 1
    items_per_page: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.items_per_page

    @property
    def limit(self) -> int:
        return self.items_per_page


def compute_pagination(total_items: int, request: PageRequest) -> dict:
    return {
        "current_page": request.page,
        "total_pages": math.ceil(total_items / request.items_per_page),
        "items_per_page": request.items_per_page,
        "total_items": total_items,
    }


def count_active_shops(shop_rows: list[dict]) -> int:
    """Distinct non-empty owner_shop_name values."""
    return len({r.get("owner_shop_name") for r in shop_rows if r.get("owner_shop_name")})


def compute_market_stats(total_items: int, active_shops: int) -> dict:
    return {
        "total_items": total_items,
        "active_shops": active_shops,
        "recent_trades": math.floor(total_items * RECENT_TRADE_RATIO),
    }


def group_categories(category_rows: list[dict], page_items: list[dict]) -> list[dict]:
    """Per-category counts (first-seen order) with a preview from the current page."""
    counts = Counter(r.get("category") for r in category_rows if r.get("category"))
    return [
        {
            "name": name,
            "count": count,
            "top_items": [
                item for item in page_items if item["category"] == name
            ][:CATEGORY_PREVIEW_SIZE],
        }
        for name, count in counts.items()
    ]


def build_recent_activity(
    page_items: list[dict], featured_items: list[dict], now: datetime,
) -> list[dict]:
    """Synthesized feed: two newest page items, then the top featured item."""
    labels = ("New listing", "Stock updated")
    activity = [
        {
            "item_name": item["name"],
            "price_change": labels[index],
            "timestamp": (now - timedelta(minutes=30 * (index + 1))).isoformat(),
            "shop_name": item["shop_name"],
        }
        for index, item in enumerate(page_items[:2])
    ]
    activity.extend(
        {
            "item_name": item["name"],
            "price_change": "Price updated",
            "timestamp": (now - timedelta(hours=1)).isoformat(),
            "shop_name": item["shop_name"],
        }
        for item in featured_items[:1]
    )
    return activity


def assemble_aggregate(
    *,
    page_items: list[dict],
    featured_items: list[dict],
    total_items: int,
    shop_rows: list[dict],
    category_rows: list[dict],
    request: PageRequest,
    now: datetime,
) -> dict:
    """Combine transformed items and sub-query results into one aggregate."""
    return {
        "featured_items": featured_items,
        "all_items": page_items,
        "pagination": compute_pagination(total_items, request),
        "market_stats": compute_market_stats(total_items, count_active_shops(shop_rows)),
        "categories": group_categories(category_rows, page_items),
        "recent_activity": build_recent_activity(page_items, featured_items, now),
    }


def empty_aggregate(request: PageRequest) -> dict:
    """Fallback when the gateway is unavailable. Never cached."""
    return {
        "featured_items": [],
        "all_items": [],
        "pagination": {
            "current_page": request.page,
            "total_pages": 0,
            "items_per_page": request.items_per_page,
            "total_items": 0,
        },
        "market_stats": compute_market_stats(0, 0),
        "categories": [],
        "recent_activity": [],
    }


def is_degraded(aggregate: dict) -> bool:
    """True for the empty fallback shape (also true for a genuinely empty catalog)."""
    return aggregate["pagination"]["total_items"] == 0 and not aggregate["all_items"]
