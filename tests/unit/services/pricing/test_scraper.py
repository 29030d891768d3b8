"""Unit tests for PriceScraper.

Tests cover:
- Cache idempotence
- Budget exhaustion and fallback-only mode
- Unknown zip codes
- Retry, back-off and fallback on scrape failures
- Batch lookups
"""

from __future__ import annotations

import random
from decimal import Decimal
from typing import TYPE_CHECKING

import httpx
import pytest
import respx

from price_scraper.cache.ttl import ResultCache
from price_scraper.core.config import Settings
from price_scraper.schemas.enums import PriceSource
from price_scraper.services.pricing import PriceScraper
from tests.conftest import ZYTE_URL
from tests.fixtures.fakes import extract_response, publix_page


if TYPE_CHECKING:
    from price_scraper.schemas.pricing import PriceRecord
    from price_scraper.services.budget import BudgetLedger
    from tests.fixtures.fakes import FakeClock


pytestmark = pytest.mark.unit


def _ok() -> httpx.Response:
    return httpx.Response(200, json=extract_response(publix_page()))


class TestScrapeProductPrice:
    """Tests for scrape_product_price()."""

    @respx.mock
    async def test_live_lookup_returns_real_data(self, scraper: PriceScraper) -> None:
        """Should price the product from a successful scrape."""
        route = respx.post(ZYTE_URL).mock(return_value=_ok())

        record = await scraper.scrape_product_price("milk", "33130")

        assert record is not None
        assert record.source is PriceSource.REAL_DATA
        assert record.price == Decimal("5.36")
        assert record.store_id == "0123"
        assert route.call_count == 1
        body = route.calls.last.request.content.decode()
        assert "storeid=0123" in body
        assert '"echoData"' in body

    @respx.mock
    async def test_second_lookup_hits_cache(self, scraper: PriceScraper) -> None:
        """Should return the identical record and make one network call."""
        route = respx.post(ZYTE_URL).mock(return_value=_ok())

        first = await scraper.scrape_product_price("milk", "33130")
        second = await scraper.scrape_product_price("milk", "33130")

        assert second is first
        assert route.call_count == 1

    @respx.mock
    async def test_cache_expires_after_six_hours(
        self, scraper: PriceScraper, clock: FakeClock
    ) -> None:
        """Should scrape again once the cached record is stale."""
        route = respx.post(ZYTE_URL).mock(return_value=_ok())

        await scraper.scrape_product_price("milk", "33130")
        clock.advance(6 * 60 * 60)
        await scraper.scrape_product_price("milk", "33130")

        assert route.call_count == 2

    @respx.mock
    async def test_exhausted_budget_returns_fallback_without_calls(
        self, scraper: PriceScraper, ledger: BudgetLedger
    ) -> None:
        """Should answer from fallback data when nothing is left to spend."""
        ledger.commit(ledger.state.total_cap)
        route = respx.post(ZYTE_URL).mock(return_value=_ok())

        record = await scraper.scrape_product_price("milk", "33130")

        assert record is not None
        assert record.source is PriceSource.FALLBACK
        assert route.call_count == 0

    @respx.mock
    async def test_unknown_zip_returns_none(self, scraper: PriceScraper) -> None:
        """Should return no record for a zip code with no Publix store."""
        route = respx.post(ZYTE_URL).mock(return_value=_ok())

        assert await scraper.scrape_product_price("milk", "00000") is None
        assert route.call_count == 0

    @respx.mock
    async def test_network_failures_fall_back_after_retries(
        self, scraper: PriceScraper, clock: FakeClock
    ) -> None:
        """Should retry with linear back-off, then serve fallback data."""
        route = respx.post(ZYTE_URL).mock(side_effect=httpx.ConnectError("down"))

        record = await scraper.scrape_product_price("bread", "32836")

        assert record is not None
        assert record.source is PriceSource.FALLBACK
        assert record.price == Decimal("2.89")
        assert route.call_count == 2
        assert clock.sleeps == [2.0]

    @respx.mock
    async def test_retry_recovers_after_transient_error(self, scraper: PriceScraper) -> None:
        """Should return live data when the second attempt succeeds."""
        respx.post(ZYTE_URL).mock(side_effect=[httpx.Response(503), _ok()])

        record = await scraper.scrape_product_price("eggs", "33629")

        assert record is not None
        assert record.source is PriceSource.REAL_DATA

    @respx.mock
    async def test_short_payload_falls_back_without_retry(
        self, scraper: PriceScraper, ledger: BudgetLedger
    ) -> None:
        """Should treat a tiny page as a parse failure and stop retrying."""
        route = respx.post(ZYTE_URL).mock(
            return_value=httpx.Response(200, json=extract_response("<html></html>"))
        )

        record = await scraper.scrape_product_price("milk", "33130")

        assert record is not None
        assert record.source is PriceSource.FALLBACK
        assert route.call_count == 1
        assert ledger.state.request_count == 1

    @respx.mock
    async def test_fallback_after_failure_is_cached(self, scraper: PriceScraper) -> None:
        """Should cache the fallback record produced after failed attempts."""
        route = respx.post(ZYTE_URL).mock(side_effect=httpx.ConnectError("down"))

        first = await scraper.scrape_product_price("milk", "33130")
        second = await scraper.scrape_product_price("milk", "33130")

        assert second is first
        assert route.call_count == 2


class TestFallbackOnlyMode:
    """Tests for a scraper without an extraction client."""

    async def test_serves_fallback_data(self, offline_scraper: PriceScraper) -> None:
        record = await offline_scraper.scrape_product_price("milk", "33130")

        assert offline_scraper.live is False
        assert record is not None
        assert record.source is PriceSource.FALLBACK
        assert record.store_id == "0123"

    async def test_unknown_zip_returns_none(self, offline_scraper: PriceScraper) -> None:
        """Should not invent a price for a zip code no store serves."""
        assert await offline_scraper.scrape_product_price("milk", "00000") is None

    async def test_repeat_lookup_returns_cached_record(self, clock: FakeClock) -> None:
        """Should hand back the same synthetic record within the TTL."""
        scraper = PriceScraper(
            None,
            ResultCache(6 * 60 * 60, clock=clock),
            rng=random.Random(11),
            promotion_chance=0.5,
        )

        records = [await scraper.scrape_product_price("milk", "33130") for _ in range(4)]

        assert all(r is records[0] for r in records)
        assert scraper.cache_stats().hits == 3

    async def test_batch_unknown_zip_yields_nulls(self, offline_scraper: PriceScraper) -> None:
        results = await offline_scraper.batch_scrape_products(["milk", "bread"], "00000")

        assert results == [None, None]

    def test_budget_views(self, offline_scraper: PriceScraper) -> None:
        assert offline_scraper.budget_status() is None
        assert "disabled" in offline_scraper.budget_report()

    async def test_batch_has_no_delays(
        self, offline_scraper: PriceScraper, clock: FakeClock
    ) -> None:
        results = await offline_scraper.batch_scrape_products(["milk", "bread"], "33130")

        assert [r.product for r in results if r] == ["milk", "bread"]
        assert clock.sleeps == []


class TestBatchScrape:
    """Tests for batch_scrape_products()."""

    @respx.mock
    async def test_sequential_with_delay(
        self, scraper: PriceScraper, clock: FakeClock
    ) -> None:
        """Should scrape each product and pause between them."""
        route = respx.post(ZYTE_URL).mock(return_value=_ok())

        results = await scraper.batch_scrape_products(["milk", "bread", "eggs"], "33130")

        assert [r.source for r in results if r] == [PriceSource.REAL_DATA] * 3
        assert route.call_count == 3
        assert clock.sleeps == [1.5, 1.5]

    @respx.mock
    async def test_budget_exhaustion_fills_remaining_with_fallback(
        self, scraper: PriceScraper, ledger: BudgetLedger
    ) -> None:
        """Should stop calling out once the daily cap is spent."""
        ledger.commit(Decimal("0.9997"))
        route = respx.post(ZYTE_URL).mock(return_value=_ok())

        results = await scraper.batch_scrape_products(["milk", "bread", "eggs"], "33130")

        assert len(results) == 3
        assert results[0] is not None
        assert results[0].source is PriceSource.REAL_DATA
        assert all(r is not None and r.is_fallback for r in results[1:])
        assert route.call_count == 1


class TestOperations:
    """Tests for cache and budget management."""

    @respx.mock
    async def test_clear_cache(self, scraper: PriceScraper) -> None:
        respx.post(ZYTE_URL).mock(return_value=_ok())
        await scraper.scrape_product_price("milk", "33130")

        scraper.clear_cache()

        assert scraper.cache_stats().size == 0

    @respx.mock
    async def test_emergency_stop_forces_fallback(self, scraper: PriceScraper) -> None:
        route = respx.post(ZYTE_URL).mock(return_value=_ok())

        scraper.emergency_stop()
        record = await scraper.scrape_product_price("milk", "33130")

        assert record is not None
        assert record.is_fallback
        assert route.call_count == 0

    def test_store_for_zip(self) -> None:
        store = PriceScraper.store_for_zip("33134")

        assert store is not None
        assert store.store_id == "0126"
        assert store.name == "Publix Super Market at Coral Gables"
        assert PriceScraper.store_for_zip("99999") is None

    @respx.mock
    async def test_budget_report_after_lookup(self, scraper: PriceScraper) -> None:
        respx.post(ZYTE_URL).mock(return_value=_ok())
        await scraper.scrape_product_price("milk", "33130")

        report = scraper.budget_report()
        status = scraper.budget_status()

        assert "Total Requests: 1" in report
        assert status is not None
        assert status.used == Decimal("0.0001")


class TestConstruction:
    """Tests for wiring the scraper's collaborators."""

    def test_injected_cache_is_kept(self, clock: FakeClock) -> None:
        """Should use the given cache even while it is still empty."""
        cache: ResultCache[PriceRecord] = ResultCache(60, clock=clock)

        scraper = PriceScraper(None, cache)

        assert scraper.cache is cache

    def test_from_settings_applies_cache_ttl(self) -> None:
        settings = Settings(scraping={"cache_ttl": 60})

        scraper = PriceScraper.from_settings(settings, None)

        assert scraper.cache.ttl_seconds == 60


class TestCacheKeys:
    """Tests for product name normalization in the cache."""

    async def test_lookup_is_case_insensitive_but_keeps_caller_name(
        self, offline_scraper: PriceScraper
    ) -> None:
        first = await offline_scraper.scrape_product_price("Milk", "33130")
        second = await offline_scraper.scrape_product_price("milk", "33130")

        assert first is not None
        assert second is not None
        assert first.product == "Milk"
        assert second.product == "milk"
        assert second.scraped_at == first.scraped_at
        assert offline_scraper.cache_stats().hits == 1

    @respx.mock
    async def test_budget_fallback_is_cached(
        self, scraper: PriceScraper, ledger: BudgetLedger
    ) -> None:
        """Should serve the same synthetic record while the budget stays spent."""
        ledger.commit(ledger.state.total_cap)
        respx.post(ZYTE_URL).mock(return_value=_ok())

        first = await scraper.scrape_product_price("bread", "33130")
        second = await scraper.scrape_product_price("bread", "33130")

        assert first is not None
        assert first.is_fallback
        assert second is first
