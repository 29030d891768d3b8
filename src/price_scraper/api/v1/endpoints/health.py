"""Health check endpoints.

Provides liveness and readiness checks for load balancers.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from price_scraper.api.dependencies import get_app_settings, get_price_scraper
from price_scraper.core.config import Settings  # noqa: TC001
from price_scraper.schemas.enums import HealthStatus
from price_scraper.schemas.health import HealthResponse, ReadinessResponse
from price_scraper.services.pricing.scraper import PriceScraper  # noqa: TC001


router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
)
async def health_check(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    """Check if the service is alive without touching any dependency."""
    return HealthResponse(
        status="healthy",
        version=settings.app.version,
        environment=settings.APP_ENV,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
)
async def readiness_check(
    settings: Annotated[Settings, Depends(get_app_settings)],
    scraper: Annotated[PriceScraper, Depends(get_price_scraper)],
) -> ReadinessResponse:
    """Check if the service is ready to handle requests.

    Live scraping is reported ``degraded`` once the budget can no longer
    cover a request; the service keeps answering with fallback prices.
    """
    if not scraper.live:
        zyte = HealthStatus.NOT_CONFIGURED
    elif scraper.client is not None and scraper.client.can_make_request(
        settings.budget.default_estimate
    ):
        zyte = HealthStatus.HEALTHY
    else:
        zyte = HealthStatus.DEGRADED

    return ReadinessResponse(
        status="ready",
        version=settings.app.version,
        environment=settings.APP_ENV,
        dependencies={"zyte": zyte},
    )
