"""Pydantic schemas for price records, budgets, stores and comparisons."""

from price_scraper.schemas.budget import BudgetStatus, CacheStats, ScrapingStatus
from price_scraper.schemas.comparison import (
    GeoLocation,
    NearbyStore,
    PriceComparison,
    PriceRange,
    Recommendations,
    Store,
    StorePrice,
)
from price_scraper.schemas.enums import PriceSource, PromotionType, StoreChain
from price_scraper.schemas.pricing import NutritionInfo, PriceRecord, Promotion


__all__ = [
    "BudgetStatus",
    "CacheStats",
    "GeoLocation",
    "NearbyStore",
    "NutritionInfo",
    "PriceComparison",
    "PriceRange",
    "PriceRecord",
    "PriceSource",
    "Promotion",
    "PromotionType",
    "Recommendations",
    "ScrapingStatus",
    "Store",
    "StoreChain",
    "StorePrice",
]
