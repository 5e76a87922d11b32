"""Tests for transform_row and link generation — raw rows to enhanced items."""

from catalog.core.domain_types import Permission
from catalog.core.listing_links import ANONYMOUS, ViewerContext, generate_links, with_links
from catalog.core.listing_transform import transform_row


def _row(**overrides):
    row = {
        "id": 7,
        "name": "Diamond Sword",
        "price_diamonds": 3,
        "category": "weapons",
        "owner_shop_name": "Steve's Smithy",
        "biome": "plains",
        "direction": "north",
        "warp_command": "/warp smithy",
        "coordinates_x": 0,
        "coordinates_z": 120,
        "last_verified": "2026-10-01T12:00:00+00:00",
        "confidence_level": "high",
    }
    row.update(overrides)
    return row


# -- transform_row -------------------------------------------------------------

def test_transform_maps_core_fields():
    item = transform_row(_row())
    assert item["id"] == "7"
    assert item["price"] == 3
    assert item["price_display"] == "3 diamonds per item"
    assert item["shop_name"] == "Steve's Smithy"
    assert item["location"]["coordinates"] == {"x": 0, "z": 120}
    assert item["verification"]["confidence_level"] == "high"
    assert "_links" not in item


def test_transform_defaults():
    item = transform_row(_row(
        owner_shop_name=None, description=None, confidence_level=None,
        trading_unit=None, price_diamonds=None, coordinates_z=None,
    ))
    assert item["description"] == "Quality diamond sword"
    assert item["shop_name"] == "Local Shop"
    assert item["server_name"] == "MainServer"
    assert item["trading_unit"] == "per_item"
    assert item["price"] == 0
    assert item["price_display"] == "Open to offers"
    assert item["verification"]["confidence_level"] == "medium"
    assert item["location"]["coordinates"] is None


# -- generate_links ------------------------------------------------------------

def test_anonymous_viewer_gets_self_and_warp_only():
    links = generate_links(transform_row(_row()), ANONYMOUS)
    assert set(links) == {"self", "copy_warp"}
    assert links["self"]["href"] == "/api/data/public_items?id=eq.7"


def test_no_warp_link_without_warp_command():
    links = generate_links(transform_row(_row(warp_command=None)))
    assert set(links) == {"self"}


def test_authenticated_non_owner_can_report():
    viewer = ViewerContext(is_authenticated=True, username="alex")
    links = generate_links(transform_row(_row()), viewer)
    assert set(links) == {"self", "copy_warp", "report_price"}


def test_owner_with_verify_permission_gets_all_links():
    viewer = ViewerContext(
        is_authenticated=True, username="steve",
        permissions=frozenset({Permission.VERIFY_PRICES.value}),
        owned_item_ids=frozenset({"7"}),
    )
    links = generate_links(transform_row(_row()), viewer)
    assert set(links) == {
        "self", "copy_warp", "edit", "update_stock", "report_price", "verify",
    }
    assert links["edit"]["href"] == "/api/internal/items/7"


def test_with_links_copies_and_covers_category_previews():
    item = transform_row(_row())
    aggregate = {
        "featured_items": [item],
        "all_items": [item],
        "categories": [{"name": "weapons", "count": 1, "top_items": [item]}],
    }
    linked = with_links(aggregate)
    assert "_links" in linked["featured_items"][0]
    assert "_links" in linked["all_items"][0]
    assert "_links" in linked["categories"][0]["top_items"][0]
    assert "_links" not in item
