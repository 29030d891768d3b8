"""Price record schemas.

A ``PriceRecord`` has the same shape whether it came from a live scrape or
from the synthetic generator; only ``source`` tells them apart.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, Field

from price_scraper.schemas.base import APIRequest, APIResponse
from price_scraper.schemas.enums import PriceSource, PromotionType


class Promotion(APIResponse):
    """A promotion attached to a price."""

    model_config = ConfigDict(frozen=True)

    type: PromotionType
    description: str
    original_price: Decimal | None = None
    savings: Decimal = Field(..., ge=0)
    valid_until: datetime | None = None


class NutritionInfo(APIResponse):
    """Per-serving nutrition facts for common staples."""

    model_config = ConfigDict(frozen=True)

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    sodium: float | None = None


class PriceRecord(APIResponse):
    """Normalized price for one product at one location."""

    model_config = ConfigDict(frozen=True)

    product: str
    price: Decimal = Field(..., ge=0)
    unit: str
    price_per_unit: Decimal = Field(..., ge=0)
    availability: bool = True
    promotions: tuple[Promotion, ...] = ()
    source: PriceSource
    scraped_at: datetime
    store_id: str | None = None
    zip_code: str | None = None
    nutrition: NutritionInfo | None = None

    @property
    def is_fallback(self) -> bool:
        """True when the record was synthesized rather than scraped."""
        return self.source is PriceSource.FALLBACK


class BatchPriceRequest(APIRequest):
    """Request body for a sequential multi-product lookup."""

    products: list[str] = Field(..., min_length=1, max_length=50)
    zip_code: str = Field(..., min_length=5, max_length=10)


class BatchPriceResponse(APIResponse):
    """Batch lookup results, aligned with the requested products."""

    zip_code: str
    results: list[PriceRecord | None]
