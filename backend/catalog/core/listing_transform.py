"""Listing Transform — raw gateway rows → viewer-agnostic enhanced items.

Invariants:
    - Pure: same row → same item; no links (see listing_links.with_links)
    - Missing confidence_level defaults to "medium"
    - coordinates present only when both x and z are present (0 is a valid coordinate)
    - Output is JSON-native (timestamps stay ISO strings) so it round-trips through the cache
"""

from catalog.core.domain_types import ConfidenceLevel, TradingUnit
from catalog.core.price_display import format_price

DEFAULT_SHOP_NAME = "Local Shop"
DEFAULT_SERVER_NAME = "MainServer"


def transform_row(row: dict) -> dict:
    """Map one public_items row to an enhanced item."""
    name = row.get("name") or ""
    trading_unit = row.get("trading_unit") or TradingUnit.PER_ITEM.value
    price = row.get("price_diamonds") or 0

    x, z = row.get("coordinates_x"), row.get("coordinates_z")
    coordinates = {"x": x, "z": z} if x is not None and z is not None else None

    return {
        "id": str(row["id"]),
        "name": name,
        "description": row.get("description") or f"Quality {name.lower()}",
        "category": row.get("category"),
        "price": price,
        "price_display": format_price(price, trading_unit).text,
        "trading_unit": trading_unit,
        "shop_name": row.get("owner_shop_name") or DEFAULT_SHOP_NAME,
        "server_name": row.get("server_name") or DEFAULT_SERVER_NAME,
        "stock_quantity": row.get("stock_quantity"),
        "location": {
            "biome": row.get("biome"),
            "direction": row.get("direction"),
            "warp_command": row.get("warp_command"),
            "coordinates": coordinates,
        },
        "verification": {
            "last_verified": row.get("last_verified"),
            "verified_by": row.get("verified_by"),
            "confidence_level": row.get("confidence_level") or ConfidenceLevel.MEDIUM.value,
        },
    }


def transform_rows(rows: list[dict]) -> list[dict]:
    return [transform_row(row) for row in rows]
