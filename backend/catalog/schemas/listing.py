"""Listing Schemas — query-parameter validation and the aggregate response contract.

Invariants:
    - ListingQuery: page >= 1, 1 <= items_per_page <= 100, min_price <= max_price
    - to_filters() emits the plain FilterCriteria dict the core understands
    - Item links serialize under "_links"

Design Decisions:
    - Enum-typed filter fields: pydantic rejects unknown biome/sort values with a 400
      before anything reaches the query builder (which validates nothing)
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from catalog.core.domain_types import Biome, Direction, SortOrder, VerificationFilter

MAX_ITEMS_PER_PAGE = 100


class ListingQuery(BaseModel):
    """GET /api/v1/listings query parameters."""
    search: str | None = Field(None, max_length=100)
    category: str | None = Field(None, max_length=50)
    biome: Biome = Biome.ANY
    direction: Direction = Direction.ANY
    min_price: float | None = Field(None, ge=0)
    max_price: float | None = Field(None, ge=0)
    verification: VerificationFilter = VerificationFilter.ANY
    sort_by: SortOrder = SortOrder.PRICE_DESC
    page: int = Field(1, ge=1)
    items_per_page: int = Field(20, ge=1, le=MAX_ITEMS_PER_PAGE)

    @field_validator("search")
    @classmethod
    def strip_search(cls, v: str | None) -> str | None:
        return v.strip() if v else v

    @model_validator(mode="after")
    def check_price_range(self) -> "ListingQuery":
        if (
            self.min_price is not None and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price cannot exceed max_price")
        return self

    def to_filters(self) -> dict:
        filters: dict = {
            "search": self.search,
            "category": self.category,
            "biome": self.biome.value,
            "direction": self.direction.value,
            "verification": self.verification.value,
            "sort_by": self.sort_by.value,
        }
        price_range = {
            k: v for k, v in (("min", self.min_price), ("max", self.max_price))
            if v is not None
        }
        if price_range:
            filters["price_range"] = price_range
        return filters


# --- Response -----------------------------------------------------------------

class Coordinates(BaseModel):
    x: float
    z: float


class Location(BaseModel):
    biome: str | None = None
    direction: str | None = None
    warp_command: str | None = None
    coordinates: Coordinates | None = None


class Verification(BaseModel):
    last_verified: str | None = None
    verified_by: str | None = None
    confidence_level: str = "medium"


class EnhancedItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str
    category: str | None = None
    price: float
    price_display: str
    trading_unit: str
    shop_name: str
    server_name: str
    stock_quantity: int | None = None
    location: Location
    verification: Verification
    links: dict[str, dict] = Field(default_factory=dict, alias="_links")


class PaginationInfo(BaseModel):
    current_page: int
    total_pages: int
    items_per_page: int
    total_items: int


class MarketStats(BaseModel):
    total_items: int
    active_shops: int
    recent_trades: int


class CategoryGroup(BaseModel):
    name: str
    count: int
    top_items: list[EnhancedItem]


class ActivityEntry(BaseModel):
    item_name: str
    price_change: str
    timestamp: str
    shop_name: str


class ListingAggregateResponse(BaseModel):
    """Aggregate for one listing page. Zero total_items + no items = degraded/empty."""
    featured_items: list[EnhancedItem]
    all_items: list[EnhancedItem]
    pagination: PaginationInfo
    market_stats: MarketStats
    categories: list[CategoryGroup]
    recent_activity: list[ActivityEntry]


class CacheStatsResponse(BaseModel):
    connected: bool
    key_count: int | None = None
    memory: str | None = None


class CacheClearResponse(BaseModel):
    removed: int
