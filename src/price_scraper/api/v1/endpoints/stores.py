"""Store directory endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from price_scraper.api.dependencies import get_comparison_service
from price_scraper.core.exceptions import StoreNotFoundException
from price_scraper.schemas.comparison import PriceHistoryPoint, Store
from price_scraper.schemas.enums import StoreChain
from price_scraper.services.comparison.service import PriceComparisonService  # noqa: TC001


router = APIRouter(tags=["Stores"])


@router.get(
    "/stores",
    response_model=list[Store],
    summary="List stores, optionally filtered by chain",
)
async def list_stores(
    service: Annotated[PriceComparisonService, Depends(get_comparison_service)],
    chain: Annotated[StoreChain | None, Query()] = None,
) -> list[Store]:
    if chain is not None:
        return service.search_stores_by_chain(chain)
    return list(service.directory.stores)


@router.get(
    "/stores/{store_id}",
    response_model=Store,
    summary="Get store details",
)
async def get_store(
    store_id: str,
    service: Annotated[PriceComparisonService, Depends(get_comparison_service)],
) -> Store:
    """Get one store by identifier.

    Raises:
        StoreNotFoundException: 404 if the store is unknown.
    """
    store = service.get_store_details(store_id)
    if store is None:
        raise StoreNotFoundException(store_id)
    return store


@router.get(
    "/stores/{store_id}/price-history",
    response_model=list[PriceHistoryPoint],
    summary="Get the daily price history of a product at a store",
)
async def get_price_history(
    store_id: str,
    service: Annotated[PriceComparisonService, Depends(get_comparison_service)],
    product: Annotated[str, Query(min_length=1)],
    days: Annotated[int, Query(ge=1, le=365)] = 30,
) -> list[PriceHistoryPoint]:
    """Daily prices, oldest first.

    Raises:
        StoreNotFoundException: 404 if the store is unknown.
    """
    if service.get_store_details(store_id) is None:
        raise StoreNotFoundException(store_id)
    return service.get_price_history(product, store_id, days)
