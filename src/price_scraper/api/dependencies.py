"""FastAPI dependencies for service access.

Services are built during application startup and stored in ``app.state``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

from price_scraper.core.exceptions import ServiceUnavailableException


if TYPE_CHECKING:
    from price_scraper.core.config import Settings
    from price_scraper.services.comparison.service import PriceComparisonService
    from price_scraper.services.pricing.scraper import PriceScraper


async def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    settings: Settings = request.app.state.settings
    return settings


async def get_price_scraper(request: Request) -> PriceScraper:
    """Get the price scraper from app state.

    Raises:
        ServiceUnavailableException: 503 if the scraper is not initialized.
    """
    scraper: PriceScraper | None = getattr(request.app.state, "price_scraper", None)
    if scraper is None:
        msg = "Price scraper not available"
        raise ServiceUnavailableException(msg)
    return scraper


async def get_comparison_service(request: Request) -> PriceComparisonService:
    """Get the price comparison service from app state.

    Raises:
        ServiceUnavailableException: 503 if the service is not initialized.
    """
    service: PriceComparisonService | None = getattr(
        request.app.state, "comparison_service", None
    )
    if service is None:
        msg = "Price comparison service not available"
        raise ServiceUnavailableException(msg)
    return service
