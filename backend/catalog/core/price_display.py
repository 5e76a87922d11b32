"""Price Display — diamond prices to human-readable text, per trading unit.

Invariants:
    - 0 → "Open to offers"; negative → "Free"
    - per_item: < 0.5 shows items per diamond, < 10 diamonds, else diamond blocks (1 decimal)
    - Pure and total: unknown trading units fall back to "N diamonds <unit>"
    - Every rounding is half-up, so 0.5 diamonds per item shows as 1 diamond
"""

import math
from dataclasses import dataclass

from catalog.core.domain_types import TradingUnit

ITEMS_PER_STACK = 64
STACKS_PER_SHULKER = 27
DIAMONDS_PER_BLOCK = 9


@dataclass(frozen=True)
class PriceDisplay:
    text: str
    icon: str
    short_text: str
    full_text: str


def _round_half_up(n: float, ndigits: int = 0) -> float:
    """Halves round up (2.5 → 3), unlike round() which rounds them to even."""
    scale = 10 ** ndigits
    rounded = math.floor(n * scale + 0.5) / scale
    return int(rounded) if ndigits == 0 else rounded


def _plural(n: float, word: str) -> str:
    return f"{_num(n)} {word}{'' if n == 1 else 's'}"


def _num(n: float) -> str:
    """Drop a trailing .0 so 2.0 renders as 2."""
    return str(int(n)) if float(n).is_integer() else str(n)


def _unit_display(trading_unit: str, quantity: int = 1) -> str:
    names = {
        TradingUnit.PER_ITEM.value: "item",
        TradingUnit.PER_STACK.value: "stack",
        TradingUnit.PER_SHULKER.value: "shulker",
    }
    name = names.get(trading_unit, "unit")
    return name if quantity == 1 else f"{name}s"


def format_price(price: float, trading_unit: str = TradingUnit.PER_ITEM.value) -> PriceDisplay:
    """Render a price in diamonds for the given trading unit."""
    price = float(price)
    if price == 0:
        return PriceDisplay("Open to offers", "offer", "Make offer", "Open to offers")
    if price < 0:
        return PriceDisplay(
            "Free", "free", "Free", f"Free {_unit_display(trading_unit)}",
        )

    if trading_unit == TradingUnit.PER_SHULKER.value:
        per_diamond = _round_half_up(STACKS_PER_SHULKER * ITEMS_PER_STACK / price)
        return PriceDisplay(
            f"{per_diamond} items per diamond", "items", f"{per_diamond}/dia",
            f"{per_diamond} items per diamond (from shulker pricing)",
        )

    if trading_unit == TradingUnit.PER_STACK.value:
        if price >= 1:
            diamonds = _round_half_up(price)
            return PriceDisplay(
                f"{_plural(diamonds, 'diamond')} per stack", "diamonds",
                f"{diamonds}dia/stack",
                f"{_plural(diamonds, 'diamond')} per stack ({ITEMS_PER_STACK} items)",
            )
        stacks = _round_half_up(1 / price)
        return PriceDisplay(
            f"{_plural(stacks, 'stack')} per diamond", "stacks",
            f"{stacks}stacks/dia", f"{_plural(stacks, 'stack')} per diamond",
        )

    if trading_unit == TradingUnit.PER_ITEM.value:
        if price < 0.5:
            per_diamond = _round_half_up(1 / price)
            text = f"{per_diamond} items per diamond"
            return PriceDisplay(text, "items", f"{per_diamond}/dia", text)
        if price < 10:
            diamonds = _round_half_up(price)
            text = f"{_plural(diamonds, 'diamond')} per item"
            return PriceDisplay(text, "diamonds", f"{diamonds}dia", text)
        blocks = _round_half_up(price / DIAMONDS_PER_BLOCK, 1)
        text = f"{_plural(blocks, 'diamond block')} per item"
        return PriceDisplay(text, "blocks", f"{_num(blocks)}DB", text)

    diamonds = _round_half_up(price)
    text = f"{_plural(diamonds, 'diamond')} {_unit_display(trading_unit)}"
    return PriceDisplay(text, "diamonds", f"{diamonds}dia", text)
