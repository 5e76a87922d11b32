"""Request-scoped access to the components built in the app lifespan.

Invariants:
    - Components live on app.state; routes receive them via Depends
    - Tests swap app.state attributes (or dependency_overrides) for fakes
"""

from fastapi import Request

from catalog.infrastructure.gateway_client import RestGatewayClient
from catalog.infrastructure.query_cache import QueryResultCache
from catalog.services.listing_orchestrator import ListingDataOrchestrator


def get_orchestrator(request: Request) -> ListingDataOrchestrator:
    return request.app.state.orchestrator


def get_query_cache(request: Request) -> QueryResultCache:
    return request.app.state.query_cache


def get_gateway(request: Request) -> RestGatewayClient:
    return request.app.state.gateway
