"""Multi-store price comparison service."""

from price_scraper.services.comparison.catalog import ChainPriceCatalog
from price_scraper.services.comparison.service import (
    DEFAULT_LOCATION,
    PriceComparisonService,
    summarize,
)
from price_scraper.services.comparison.stores import (
    FLORIDA_STORES,
    StoreDirectory,
    haversine_miles,
)


__all__ = [
    "DEFAULT_LOCATION",
    "FLORIDA_STORES",
    "ChainPriceCatalog",
    "PriceComparisonService",
    "StoreDirectory",
    "haversine_miles",
    "summarize",
]
