"""Tests for format_price — text per trading unit and price band."""

import pytest

from catalog.core.price_display import format_price


@pytest.mark.parametrize("price, unit, text", [
    (0, "per_item", "Open to offers"),
    (-1, "per_item", "Free"),
    (0.25, "per_item", "4 items per diamond"),
    (1, "per_item", "1 diamond per item"),
    (3, "per_item", "3 diamonds per item"),
    (18, "per_item", "2 diamond blocks per item"),
    (20, "per_item", "2.2 diamond blocks per item"),
    (5, "per_stack", "5 diamonds per stack"),
    (0.5, "per_stack", "2 stacks per diamond"),
    (2, "per_shulker", "864 items per diamond"),
])
def test_format_price_text(price, unit, text):
    assert format_price(price, unit).text == text


def test_free_full_text_names_unit():
    assert format_price(-5, "per_stack").full_text == "Free stack"


def test_diamond_block_short_text():
    assert format_price(18).short_text == "2DB"


def test_zero_price_is_offer():
    display = format_price(0, "per_shulker")
    assert display.icon == "offer"
    assert display.short_text == "Make offer"


@pytest.mark.parametrize("price, unit, text", [
    (0.5, "per_item", "1 diamond per item"),
    (2.5, "per_item", "3 diamonds per item"),
    (4.5, "per_item", "5 diamonds per item"),
    (2.5, "per_stack", "3 diamonds per stack"),
    (0.4, "per_stack", "3 stacks per diamond"),
    (0.4, "per_item", "3 items per diamond"),
    (22.05, "per_item", "2.5 diamond blocks per item"),
])
def test_halves_round_up(price, unit, text):
    assert format_price(price, unit).text == text
