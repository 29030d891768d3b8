"""Publix price scraping service."""

from price_scraper.services.pricing.exceptions import PriceParseError, PricingError
from price_scraper.services.pricing.fallback import (
    LocationTier,
    MatchKind,
    PricingMatch,
    PromotionGenerator,
    build_price_record,
    match_base_price,
)
from price_scraper.services.pricing.scraper import PriceScraper


__all__ = [
    "LocationTier",
    "MatchKind",
    "PriceParseError",
    "PriceScraper",
    "PricingError",
    "PricingMatch",
    "PromotionGenerator",
    "build_price_record",
    "match_base_price",
]
