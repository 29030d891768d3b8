"""Store directory and price comparison schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import ConfigDict, Field

from price_scraper.schemas.base import APIRequest, APIResponse
from price_scraper.schemas.enums import StoreChain
from price_scraper.schemas.pricing import PriceRecord


class GeoLocation(APIResponse):
    """A caller's position."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    zip_code: str
    city: str
    state: str = "FL"


class OpeningHours(APIResponse):
    """Opening and closing time for one weekday (24h clock)."""

    model_config = ConfigDict(frozen=True)

    open: str
    close: str


class StoreServices(APIResponse):
    """Services offered at a store."""

    model_config = ConfigDict(frozen=True)

    pickup: bool = False
    delivery: bool = False
    pharmacy: bool = False
    deli: bool = False


class Store(APIResponse):
    """A physical grocery store."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    chain: StoreChain
    address: str
    latitude: float
    longitude: float
    zip_code: str
    phone: str
    hours: dict[str, OpeningHours] = Field(default_factory=dict)
    services: StoreServices = StoreServices()


class NearbyStore(APIResponse):
    """A store with its distance from the caller."""

    model_config = ConfigDict(frozen=True)

    store: Store
    distance_miles: float = Field(..., ge=0)


class StorePrice(APIResponse):
    """One store's price for a product."""

    model_config = ConfigDict(frozen=True)

    store: Store
    distance_miles: float
    record: PriceRecord

    @property
    def price(self) -> Decimal:
        """Shortcut to the record's price."""
        return self.record.price


class PriceRange(APIResponse):
    """Lowest and highest price observed."""

    min: Decimal
    max: Decimal


class Recommendations(APIResponse):
    """Highlights derived from a comparison."""

    best_value: StorePrice
    closest: StorePrice
    best_promotions: list[StorePrice] = Field(default_factory=list)


class PriceComparison(APIResponse):
    """Prices for one product across nearby stores, cheapest first."""

    model_config = ConfigDict(frozen=True)

    ingredient: str
    searched_at: datetime
    user_location: GeoLocation
    stores: list[StorePrice]
    best_price: StorePrice
    average_price: Decimal
    price_range: PriceRange
    recommendations: Recommendations
    estimated_savings: Decimal


class ComparisonRequest(APIRequest):
    """Request body for a multi-store comparison."""

    ingredients: list[str] = Field(..., min_length=1, max_length=25)
    location: GeoLocation | None = None
    radius_miles: float | None = Field(default=None, gt=0, le=200)
    prefer_real_data: bool = True


class ComparisonResponse(APIResponse):
    """Comparison results; products without data are omitted."""

    comparisons: list[PriceComparison]


class PriceHistoryPoint(APIResponse):
    """A single day in a price history series."""

    day: date
    price: Decimal
