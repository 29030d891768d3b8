"""Multi-store price comparison endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from price_scraper.api.dependencies import get_comparison_service
from price_scraper.observability.logging import get_logger
from price_scraper.schemas.comparison import ComparisonRequest, ComparisonResponse
from price_scraper.services.comparison.service import PriceComparisonService  # noqa: TC001


logger = get_logger(__name__)

router = APIRouter(tags=["Comparisons"])


@router.post(
    "/comparisons",
    response_model=ComparisonResponse,
    summary="Compare product prices across nearby stores",
)
async def compare_prices(
    body: ComparisonRequest,
    service: Annotated[PriceComparisonService, Depends(get_comparison_service)],
) -> ComparisonResponse:
    """Compare prices for each ingredient at stores near the caller.

    When no location is given the caller is assumed to be in downtown
    Miami. Ingredients no nearby store can price are omitted.
    """
    location = body.location or service.detect_user_location()
    logger.info(
        "Comparing prices",
        ingredients=body.ingredients,
        zip_code=location.zip_code,
        radius_miles=body.radius_miles,
    )
    comparisons = await service.compare(
        body.ingredients,
        location,
        body.radius_miles,
        prefer_real_data=body.prefer_real_data,
    )
    return ComparisonResponse(comparisons=comparisons)
