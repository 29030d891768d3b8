"""Publix price lookup endpoints.

Provides:
- GET /prices/{product}?zipCode= for a single product
- POST /prices/batch for several products at one zip code
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from price_scraper.api.dependencies import get_price_scraper
from price_scraper.core.exceptions import LocationNotServedException
from price_scraper.observability.logging import get_logger
from price_scraper.schemas.pricing import (
    BatchPriceRequest,
    BatchPriceResponse,
    PriceRecord,
)
from price_scraper.services.pricing.scraper import PriceScraper  # noqa: TC001


logger = get_logger(__name__)

router = APIRouter(tags=["Prices"])


@router.get(
    "/prices/{product}",
    response_model=PriceRecord,
    summary="Get the Publix price of a product",
    responses={
        404: {
            "description": "No Publix store serves the zip code",
            "content": {
                "application/json": {
                    "example": {
                        "error": "LOCATION_NOT_SERVED",
                        "message": "No Publix store is served for zip code '00000'",
                    }
                }
            },
        },
    },
)
async def get_product_price(
    product: str,
    scraper: Annotated[PriceScraper, Depends(get_price_scraper)],
    zip_code: Annotated[
        str,
        Query(alias="zipCode", min_length=5, max_length=10, description="Florida zip code"),
    ],
) -> PriceRecord:
    """Get a live or synthetic price for ``product``.

    The ``source`` field of the response tells live data from fallback
    pricing. Scraping failures never surface as errors.

    Raises:
        LocationNotServedException: 404 if no Publix store serves the zip code.
    """
    logger.info("Fetching product price", product=product, zip_code=zip_code)
    record = await scraper.scrape_product_price(product, zip_code)
    if record is None:
        raise LocationNotServedException(zip_code)
    return record


@router.post(
    "/prices/batch",
    response_model=BatchPriceResponse,
    summary="Get Publix prices for several products",
)
async def batch_product_prices(
    body: BatchPriceRequest,
    scraper: Annotated[PriceScraper, Depends(get_price_scraper)],
) -> BatchPriceResponse:
    """Look up products sequentially; ``results`` aligns with ``products``.

    Products that cannot be priced at the zip code are returned as null.
    """
    results = await scraper.batch_scrape_products(body.products, body.zip_code)
    return BatchPriceResponse(zip_code=body.zip_code, results=results)
