"""Multi-store price comparison.

Prices each requested product at every store near the caller, one store
at a time, and summarizes the results. Publix stores are priced through
the live scraper when one is configured; every other store comes from the
static chain catalog.
"""

from __future__ import annotations

import random
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Final

from price_scraper.cache.ttl import ResultCache
from price_scraper.observability.logging import get_logger
from price_scraper.schemas.budget import ScrapingStatus
from price_scraper.schemas.comparison import (
    GeoLocation,
    PriceComparison,
    PriceHistoryPoint,
    PriceRange,
    Recommendations,
    StorePrice,
)
from price_scraper.schemas.enums import StoreChain
from price_scraper.services.comparison.catalog import ChainPriceCatalog
from price_scraper.services.comparison.stores import StoreDirectory
from price_scraper.services.pricing.fallback import to_cents


if TYPE_CHECKING:
    from collections.abc import Sequence

    from price_scraper.core.config import Settings
    from price_scraper.schemas.comparison import NearbyStore, Store
    from price_scraper.schemas.pricing import PriceRecord
    from price_scraper.services.pricing.scraper import PriceScraper


logger = get_logger(__name__)

COMPARISON_CACHE_TTL_SECONDS: Final[int] = 5 * 60
DEFAULT_RADIUS_MILES: Final[float] = 15.0
MAX_PROMOTION_PICKS: Final[int] = 3

HISTORY_BASE_PRICE: Final[Decimal] = Decimal("5.99")
HISTORY_VARIATION: Final[float] = 0.4

DEFAULT_LOCATION: Final[GeoLocation] = GeoLocation(
    latitude=25.7617,
    longitude=-80.1918,
    zip_code="33131",
    city="Miami",
    state="FL",
)


def summarize(
    ingredient: str,
    location: GeoLocation,
    store_prices: Sequence[StorePrice],
) -> PriceComparison:
    """Rank store prices for one product and derive the summary figures.

    Args:
        ingredient: Product the prices refer to.
        location: Caller location the comparison was made for.
        store_prices: At least one store price.

    Returns:
        Comparison with stores sorted from cheapest to most expensive.

    Raises:
        ValueError: If ``store_prices`` is empty.
    """
    if not store_prices:
        msg = "At least one store price is required"
        raise ValueError(msg)

    ranked = sorted(store_prices, key=lambda sp: sp.price)
    prices = [sp.price for sp in ranked]
    low, high = prices[0], prices[-1]

    promoted = [sp for sp in ranked if sp.record.promotions]
    promoted.sort(key=lambda sp: sp.record.promotions[0].savings, reverse=True)

    return PriceComparison(
        ingredient=ingredient,
        searched_at=datetime.now(UTC),
        user_location=location,
        stores=ranked,
        best_price=ranked[0],
        average_price=to_cents(sum(prices, Decimal(0)) / len(prices)),
        price_range=PriceRange(min=low, max=high),
        recommendations=Recommendations(
            best_value=ranked[0],
            closest=min(ranked, key=lambda sp: sp.distance_miles),
            best_promotions=promoted[:MAX_PROMOTION_PICKS],
        ),
        estimated_savings=to_cents(high - low),
    )


class PriceComparisonService:
    """Compares product prices across nearby Florida stores."""

    def __init__(
        self,
        scraper: PriceScraper,
        *,
        catalog: ChainPriceCatalog | None = None,
        directory: StoreDirectory | None = None,
        cache: ResultCache[PriceComparison] | None = None,
        default_radius_miles: float = DEFAULT_RADIUS_MILES,
        rng: random.Random | None = None,
    ) -> None:
        self.scraper = scraper
        self.rng = rng or random.Random()
        self.catalog = catalog if catalog is not None else ChainPriceCatalog(self.rng)
        self.directory = directory if directory is not None else StoreDirectory()
        self.cache = cache if cache is not None else ResultCache(COMPARISON_CACHE_TTL_SECONDS)
        self.default_radius_miles = default_radius_miles
        self.live_scraping_enabled = True

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        scraper: PriceScraper,
        *,
        rng: random.Random | None = None,
    ) -> PriceComparisonService:
        return cls(
            scraper,
            cache=ResultCache(settings.comparison.cache_ttl),
            default_radius_miles=settings.comparison.default_radius_miles,
            rng=rng,
        )

    @property
    def live_scraping(self) -> bool:
        """Whether Publix stores are currently priced through the scraper."""
        return self.live_scraping_enabled and self.scraper.live

    def enable_live_scraping(self) -> bool:
        """Turn live Publix pricing back on.

        Returns:
            Whether live pricing is now active; False when no extraction
            client is configured.
        """
        self.live_scraping_enabled = True
        if not self.scraper.live:
            logger.warning("Cannot enable live scraping without a Zyte API key")
            return False
        logger.info("Live scraping enabled")
        return True

    def disable_live_scraping(self) -> None:
        """Price every store from the chain catalog until re-enabled."""
        self.live_scraping_enabled = False
        logger.info("Live scraping disabled - using catalog prices only")

    async def compare(
        self,
        products: Sequence[str],
        location: GeoLocation,
        radius_miles: float | None = None,
        *,
        prefer_real_data: bool = True,
    ) -> list[PriceComparison]:
        """Compare prices for each product at stores near ``location``.

        Products that no nearby store can price are omitted. An empty list
        is returned when no store lies within the radius. With
        ``prefer_real_data`` off, or live scraping disabled, Publix stores
        are priced from the chain catalog like every other store.
        """
        radius = radius_miles if radius_miles is not None else self.default_radius_miles
        nearby = self.find_nearby_stores(location, radius)
        if not nearby:
            logger.info(
                "No stores within radius",
                zip_code=location.zip_code,
                radius_miles=radius,
            )
            return []

        use_live = prefer_real_data and self.live_scraping
        logger.info(
            "Comparing prices",
            product_count=len(products),
            store_count=len(nearby),
            zip_code=location.zip_code,
            live=use_live,
        )
        results: list[PriceComparison] = []
        for product in products:
            comparison = await self._compare_product(product, location, nearby, use_live)
            if comparison is not None:
                results.append(comparison)
        return results

    async def _compare_product(
        self,
        product: str,
        location: GeoLocation,
        nearby: Sequence[NearbyStore],
        use_live: bool,
    ) -> PriceComparison | None:
        key = (product.strip().lower(), location.zip_code, use_live)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Comparison cache hit", product=product, zip_code=location.zip_code)
            return cached

        store_prices: list[StorePrice] = []
        for entry in nearby:
            record = await self._price_at(entry.store, product, use_live=use_live)
            if record is not None:
                store_prices.append(
                    StorePrice(store=entry.store, distance_miles=entry.distance_miles, record=record)
                )

        if not store_prices:
            logger.info("No store could price product", product=product)
            return None

        comparison = summarize(product, location, store_prices)
        self.cache.put(key, comparison)
        return comparison

    async def _price_at(
        self,
        store: Store,
        product: str,
        *,
        use_live: bool,
    ) -> PriceRecord | None:
        if use_live and store.chain is StoreChain.PUBLIX:
            record = await self.scraper.scrape_product_price(product, store.zip_code)
            if record is not None:
                return record
            logger.debug("Scraper has no data, using chain catalog", store_id=store.id)
        return self.catalog.price(store, product)

    def find_nearby_stores(
        self,
        location: GeoLocation,
        radius_miles: float | None = None,
    ) -> list[NearbyStore]:
        radius = radius_miles if radius_miles is not None else self.default_radius_miles
        return self.directory.find_nearby(location, radius)

    def get_store_details(self, store_id: str) -> Store | None:
        return self.directory.get(store_id)

    def search_stores_by_chain(self, chain: StoreChain) -> list[Store]:
        return self.directory.by_chain(chain)

    def detect_user_location(self) -> GeoLocation:
        """Best-guess caller location; always downtown Miami for now."""
        return DEFAULT_LOCATION

    def get_price_history(
        self,
        product: str,
        store_id: str,
        days: int = 30,
    ) -> list[PriceHistoryPoint]:
        """Synthetic daily prices for the last ``days`` days (oldest first).

        Prices vary by up to 20% either way around $5.99.
        """
        logger.debug("Generating price history", product=product, store_id=store_id, days=days)
        today = datetime.now(UTC).date()
        history = []
        for offset in range(days, -1, -1):
            variation = Decimal(str((self.rng.random() - 0.5) * HISTORY_VARIATION))
            history.append(
                PriceHistoryPoint(
                    day=today - timedelta(days=offset),
                    price=to_cents(HISTORY_BASE_PRICE * (1 + variation)),
                )
            )
        return history

    def scraping_status(self) -> ScrapingStatus:
        """Whether live Publix scraping is on, with budget and cache figures."""
        if not self.scraper.live:
            return ScrapingStatus(
                enabled=False,
                cache=self.scraper.cache_stats(),
                error="Zyte API key not configured",
            )
        if not self.live_scraping_enabled:
            return ScrapingStatus(
                enabled=False,
                budget_status=self.scraper.budget_status(),
                cache=self.scraper.cache_stats(),
                error="Live scraping disabled",
            )
        return ScrapingStatus(
            enabled=True,
            budget_status=self.scraper.budget_status(),
            cache=self.scraper.cache_stats(),
        )
