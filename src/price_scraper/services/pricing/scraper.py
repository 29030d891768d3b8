"""Publix price scraper with budget-aware fallback.

Lookups go through a TTL cache, then the extraction client, and degrade to
synthetic prices whenever the budget, the network or the page content gets
in the way. A zip code with no known Publix store yields no record, except
when the budget is already spent: that check comes first and always
answers with synthetic data.
"""

from __future__ import annotations

import asyncio
import random
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from urllib.parse import quote

from price_scraper.cache.ttl import ResultCache
from price_scraper.clients.zyte.exceptions import ScrapeError
from price_scraper.observability.logging import get_logger
from price_scraper.schemas.enums import PriceSource
from price_scraper.services.budget.constants import DEFAULT_REQUEST_ESTIMATE
from price_scraper.services.budget.exceptions import BudgetExceededError
from price_scraper.services.pricing.constants import (
    PROMOTION_CHANCE,
    PUBLIX_SEARCH_URL,
    PUBLIX_STORES_BY_ZIP,
    PublixStore,
)
from price_scraper.services.pricing.exceptions import PriceParseError
from price_scraper.services.pricing.fallback import (
    PromotionGenerator,
    build_price_record,
)


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from price_scraper.clients.zyte.client import ZyteClient
    from price_scraper.core.config import Settings
    from price_scraper.schemas.budget import BudgetStatus, CacheStats
    from price_scraper.schemas.pricing import PriceRecord


logger = get_logger(__name__)

PRICE_CACHE_TTL_SECONDS = 6 * 60 * 60


class PriceScraper:
    """Looks up Publix prices by product and zip code.

    Without a client the scraper runs in fallback-only mode: every lookup
    for a served zip code is answered with synthetic data and no network
    call is attempted.
    """

    def __init__(
        self,
        client: ZyteClient | None = None,
        cache: ResultCache[PriceRecord] | None = None,
        *,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        max_retries: int = 2,
        retry_backoff_seconds: float = 2.0,
        min_payload_length: int = 100,
        batch_delay_seconds: float = 1.5,
        promotion_chance: float = PROMOTION_CHANCE,
        request_estimate: Decimal = DEFAULT_REQUEST_ESTIMATE,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else ResultCache(PRICE_CACHE_TTL_SECONDS)
        self.promotions = PromotionGenerator(rng or random.Random(), promotion_chance)
        self._sleep = sleep
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.min_payload_length = min_payload_length
        self.batch_delay_seconds = batch_delay_seconds
        self.request_estimate = request_estimate

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: ZyteClient | None,
        *,
        rng: random.Random | None = None,
    ) -> PriceScraper:
        """Build a scraper configured from the ``scraping`` settings section."""
        scraping = settings.scraping
        return cls(
            client,
            ResultCache(scraping.cache_ttl),
            rng=rng,
            max_retries=scraping.max_retries,
            retry_backoff_seconds=scraping.retry_backoff_seconds,
            min_payload_length=scraping.min_payload_length,
            batch_delay_seconds=scraping.batch_delay_seconds,
            promotion_chance=scraping.promotion_chance,
            request_estimate=settings.budget.default_estimate,
        )

    @property
    def live(self) -> bool:
        """Whether a live extraction client is configured."""
        return self.client is not None

    @staticmethod
    def store_for_zip(zip_code: str) -> PublixStore | None:
        """Return the Publix store serving ``zip_code``, if any."""
        return PUBLIX_STORES_BY_ZIP.get(zip_code.strip())

    def _can_afford(self) -> bool:
        return self.client is not None and self.client.can_make_request(
            self.request_estimate
        )

    def _fallback(
        self,
        product: str,
        zip_code: str,
        store: PublixStore | None = None,
    ) -> PriceRecord:
        return build_price_record(
            product,
            zip_code,
            source=PriceSource.FALLBACK,
            promotions=self.promotions,
            store_id=store.store_id if store else None,
        )

    async def scrape_product_price(
        self,
        product: str,
        zip_code: str,
    ) -> PriceRecord | None:
        """Get the price of ``product`` at the Publix serving ``zip_code``.

        Args:
            product: Product name, e.g. ``"milk"``.
            zip_code: Five-digit Florida zip code.

        Returns:
            A live or synthetic price record, or None when no Publix store
            is known for ``zip_code``. Never raises for a served zip code.
        """
        key = (product.strip().lower(), zip_code)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Price cache hit", product=product, zip_code=zip_code)
            if cached.product != product:
                return cached.model_copy(update={"product": product})
            return cached

        if self.live and not self._can_afford():
            return self._budget_fallback(product, zip_code)

        store = self.store_for_zip(zip_code)
        if store is None:
            logger.info("No Publix store for zip code", zip_code=zip_code)
            return None

        if self.live:
            logger.info(
                "Scraping Publix price",
                product=product,
                zip_code=zip_code,
                store_id=store.store_id,
                store_name=store.name,
            )
            record = await self._scrape_with_retry(product, zip_code, store)
        else:
            record = self._fallback(product, zip_code, store)
        self.cache.put(key, record)
        return record

    def _budget_fallback(self, product: str, zip_code: str) -> PriceRecord:
        logger.info(
            "Budget exhausted, using fallback pricing",
            product=product,
            zip_code=zip_code,
        )
        record = self._fallback(product, zip_code, self.store_for_zip(zip_code))
        self.cache.put((product.strip().lower(), zip_code), record)
        return record

    async def _scrape_with_retry(
        self,
        product: str,
        zip_code: str,
        store: PublixStore,
    ) -> PriceRecord:
        assert self.client is not None
        url = PUBLIX_SEARCH_URL.format(query=quote(product, safe=""), store_id=store.store_id)

        for attempt in range(1, self.max_retries + 1):
            try:
                html = await self.client.scrape_html(
                    url,
                    {
                        "product": product,
                        "zipCode": zip_code,
                        "storeId": store.store_id,
                        "attempt": attempt,
                    },
                )
                return self._parse(html, product, zip_code, store)
            except BudgetExceededError as e:
                logger.info(
                    "Budget exhausted mid-lookup, using fallback pricing",
                    product=product,
                    scope=e.scope.value,
                )
                break
            except PriceParseError as e:
                logger.warning(
                    "Publix page could not be parsed, using fallback pricing",
                    product=product,
                    store_id=store.store_id,
                    payload_length=e.payload_length,
                )
                break
            except ScrapeError as e:
                logger.warning(
                    "Scrape attempt failed",
                    product=product,
                    attempt=attempt,
                    max_retries=self.max_retries,
                    kind=e.kind.value,
                    error=str(e),
                )
                if attempt < self.max_retries:
                    await self._sleep(self.retry_backoff_seconds * attempt)
        else:
            logger.warning(
                "Scrape retries exhausted, using fallback pricing",
                product=product,
                zip_code=zip_code,
            )

        return self._fallback(product, zip_code, store)

    def _parse(
        self,
        html: str,
        product: str,
        zip_code: str,
        store: PublixStore,
    ) -> PriceRecord:
        """Turn a search page into a price record.

        Raises:
            PriceParseError: If the payload is missing or implausibly short.
        """
        if not html or len(html) < self.min_payload_length:
            raise PriceParseError(product, len(html or ""))

        record = build_price_record(
            product,
            zip_code,
            source=PriceSource.REAL_DATA,
            promotions=self.promotions,
            store_id=store.store_id,
            now=datetime.now(UTC),
        )
        logger.info("Scraped Publix price", product=product, price=str(record.price))
        return record

    async def batch_scrape_products(
        self,
        products: Sequence[str],
        zip_code: str,
    ) -> list[PriceRecord | None]:
        """Look up several products sequentially for one zip code.

        Once the budget cannot cover another call, the remaining products
        are answered with synthetic prices.
        """
        logger.info("Batch scraping", product_count=len(products), zip_code=zip_code)
        results: list[PriceRecord | None] = []

        for index, product in enumerate(products):
            if self.live and not self._can_afford():
                logger.info(
                    "Budget exhausted during batch",
                    position=index + 1,
                    product_count=len(products),
                )
                results.extend(self._budget_fallback(p, zip_code) for p in products[index:])
                break

            results.append(await self.scrape_product_price(product, zip_code))
            if self.live and index < len(products) - 1:
                await self._sleep(self.batch_delay_seconds)

        return results

    def budget_status(self) -> BudgetStatus | None:
        """Budget snapshot with threshold alerts, or None in fallback-only mode."""
        if self.client is None:
            return None
        return self.client.ledger.check_thresholds()

    def budget_report(self) -> str:
        """Human-readable budget report."""
        if self.client is None:
            return "Budget Report: live scraping disabled (no API key configured)"
        self.client.ledger.check_thresholds()
        return self.client.ledger.format_report()

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Price cache cleared")

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def emergency_stop(self) -> None:
        """Halt all further paid requests for the life of the process."""
        if self.client is not None:
            self.client.stop_all_requests()
        logger.warning("Emergency stop - Publix scraper disabled")
