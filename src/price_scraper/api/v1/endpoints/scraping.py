"""Live scraping status endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from price_scraper.api.dependencies import get_comparison_service
from price_scraper.schemas.budget import ScrapingStatus
from price_scraper.services.comparison.service import PriceComparisonService  # noqa: TC001


router = APIRouter(tags=["Scraping"])


@router.get(
    "/scraping/status",
    response_model=ScrapingStatus,
    summary="Live scraping status with budget and cache figures",
)
async def scraping_status(
    service: Annotated[PriceComparisonService, Depends(get_comparison_service)],
) -> ScrapingStatus:
    """Report whether live scraping is enabled and how much budget is left."""
    return service.scraping_status()


@router.post(
    "/scraping/enable",
    response_model=ScrapingStatus,
    summary="Resume live Publix pricing",
)
async def enable_scraping(
    service: Annotated[PriceComparisonService, Depends(get_comparison_service)],
) -> ScrapingStatus:
    """Resume live pricing; stays disabled when no API key is configured."""
    service.enable_live_scraping()
    return service.scraping_status()


@router.post(
    "/scraping/disable",
    response_model=ScrapingStatus,
    summary="Price Publix stores from the catalog only",
)
async def disable_scraping(
    service: Annotated[PriceComparisonService, Depends(get_comparison_service)],
) -> ScrapingStatus:
    service.disable_live_scraping()
    return service.scraping_status()
