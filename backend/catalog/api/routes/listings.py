"""Listings — filtered, paginated listing aggregate for the marketplace browser.

Invariants:
    - Query parameters are validated by Pydantic before reaching the orchestrator
    - Always 200 with an aggregate: gateway failures yield the empty fallback,
      never an error response
    - Served for an anonymous viewer (no auth on this surface)
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from catalog.api.dependencies import get_orchestrator
from catalog.core.listing_links import ANONYMOUS
from catalog.schemas.listing import ListingAggregateResponse, ListingQuery
from catalog.services.listing_orchestrator import ListingDataOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/listings", tags=["listings"])


@router.get("", response_model=ListingAggregateResponse)
async def list_listings(
    params: Annotated[ListingQuery, Query()],
    orchestrator: ListingDataOrchestrator = Depends(get_orchestrator),
):
    """Page of filtered listings plus featured items, stats and categories."""
    return await orchestrator.load(
        params.to_filters(),
        page=params.page,
        items_per_page=params.items_per_page,
        viewer=ANONYMOUS,
    )
