"""Domain Types — enums for every closed set of listing filter and item values.

Invariants:
    - All valid filter values encoded as Enums; "any" means "no predicate"
    - str Enums: values are the exact strings used in query params and REST filters

Design Decisions:
    - NewType for identifiers: zero runtime cost, full type-checker support
    - str Enums serialize to JSON without custom encoders (cache payloads are JSON)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

CacheKey = NewType("CacheKey", str)


# ─── Filter Enums ────────────────────────────────────────────────

class Biome(str, Enum):
    """Shop biome filter."""
    ANY = "any"
    JUNGLE = "jungle"
    DESERT = "desert"
    OCEAN = "ocean"
    MOUNTAINS = "mountains"
    PLAINS = "plains"
    NETHER = "nether"
    END = "end"


class Direction(str, Enum):
    """Shop direction from spawn."""
    ANY = "any"
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    SPAWN = "spawn"


class VerificationFilter(str, Enum):
    """Price verification state filter."""
    ANY = "any"
    VERIFIED = "verified"
    UNVERIFIED = "unverified"


class SortOrder(str, Enum):
    """Listing sort orders. PRICE_DESC is the default."""
    PRICE_DESC = "price_desc"
    PRICE_ASC = "price_asc"
    NAME_ASC = "name_asc"
    RECENT = "recent"
    VERIFIED_FIRST = "verified_first"


# ─── Item Enums ──────────────────────────────────────────────────

class ConfidenceLevel(str, Enum):
    """Price confidence; rows without one are treated as MEDIUM."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TradingUnit(str, Enum):
    """Quantity a listed price refers to."""
    PER_ITEM = "per_item"
    PER_STACK = "per_stack"
    PER_SHULKER = "per_shulker"


class Permission(str, Enum):
    """Viewer permissions that unlock item links."""
    VERIFY_PRICES = "VERIFY_PRICES"
