"""Shared test fixtures for the price scraper tests.

Provides fake clocks, seeded random sources and pre-wired scraping
components so tests never touch the network or real time.
"""

from __future__ import annotations

import os


os.environ["APP_ENV"] = "test"
os.environ.pop("ZYTE_API_KEY", None)

import random
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from price_scraper.cache.rate_limit import TokenBucketRateLimiter
from price_scraper.cache.ttl import ResultCache
from price_scraper.clients.zyte.client import ZyteClient
from price_scraper.core.config import get_settings
from price_scraper.services.budget.ledger import BudgetLedger
from price_scraper.services.pricing.scraper import PriceScraper
from tests.fixtures.fakes import FakeClock, FakeToday


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator


ZYTE_URL = "https://api.zyte.com/v1/extract"


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None]:
    """Make every test read settings afresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def today() -> FakeToday:
    return FakeToday(date(2026, 3, 1))


@pytest.fixture
def ledger(today: FakeToday) -> BudgetLedger:
    return BudgetLedger(Decimal("5.00"), Decimal("1.00"), today=today)


@pytest.fixture
def rate_limiter(clock: FakeClock) -> TokenBucketRateLimiter:
    """A bucket large enough that tests never wait."""
    return TokenBucketRateLimiter(1000, 1000, clock=clock, sleep=clock.sleep)


@pytest.fixture
async def zyte_client(
    ledger: BudgetLedger,
    rate_limiter: TokenBucketRateLimiter,
) -> AsyncGenerator[ZyteClient]:
    client = ZyteClient(
        "test-api-key",
        ledger=ledger,
        rate_limiter=rate_limiter,
        api_url=ZYTE_URL,
    )
    await client.initialize()
    yield client
    await client.shutdown()


@pytest.fixture
def scraper(zyte_client: ZyteClient, clock: FakeClock) -> PriceScraper:
    """Live scraper with no promotions and instant back-off."""
    return PriceScraper(
        zyte_client,
        ResultCache(6 * 60 * 60, clock=clock),
        rng=random.Random(7),
        sleep=clock.sleep,
        promotion_chance=0.0,
    )


@pytest.fixture
def offline_scraper(clock: FakeClock) -> PriceScraper:
    """Fallback-only scraper (no API key configured)."""
    return PriceScraper(
        None,
        ResultCache(6 * 60 * 60, clock=clock),
        rng=random.Random(7),
        sleep=clock.sleep,
        promotion_chance=0.0,
    )
