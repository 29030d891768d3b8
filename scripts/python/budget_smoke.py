#!/usr/bin/env python3
"""Live smoke test against the Zyte API within the configured budget.

Scrapes a handful of staples in three Florida markets, stops as soon as
the budget can no longer cover a request, and logs a summary with the
final budget report. Requires ``ZYTE_API_KEY``.

Usage:
    ZYTE_API_KEY=... python scripts/python/budget_smoke.py
"""

from __future__ import annotations

import asyncio
import sys
import time
from dataclasses import dataclass

from price_scraper.clients.zyte import ZyteConfigurationError, create_zyte_client
from price_scraper.core.config import get_settings
from price_scraper.observability.logging import get_logger, setup_logging
from price_scraper.services.pricing.scraper import PriceScraper


logger = get_logger("budget_smoke")

PRODUCTS = (
    "milk",
    "bread",
    "eggs",
    "bananas",
    "chicken breast",
    "butter",
    "cheese",
    "yogurt",
    "rice",
    "pasta",
)
ZIP_CODES = (
    "33130",  # Miami, Brickell
    "32836",  # Orlando, Lake Buena Vista
    "33629",  # Tampa, Westshore
)


@dataclass(frozen=True, slots=True)
class SmokeResult:
    product: str
    zip_code: str
    source: str | None
    price: str | None
    duration_ms: float


async def run() -> int:
    settings = get_settings()
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )

    try:
        client = create_zyte_client(settings=settings)
    except ZyteConfigurationError as e:
        logger.error(str(e))
        return 1

    await client.initialize()
    scraper = PriceScraper.from_settings(settings, client)
    results: list[SmokeResult] = []

    try:
        for zip_code in ZIP_CODES:
            for product in PRODUCTS:
                if not client.can_make_request(settings.budget.default_estimate):
                    logger.warning("Budget exhausted - stopping", completed=len(results))
                    break
                started = time.perf_counter()
                record = await scraper.scrape_product_price(product, zip_code)
                results.append(
                    SmokeResult(
                        product=product,
                        zip_code=zip_code,
                        source=record.source.value if record else None,
                        price=str(record.price) if record else None,
                        duration_ms=(time.perf_counter() - started) * 1000,
                    )
                )
                logger.info(
                    "Smoke lookup",
                    product=product,
                    zip_code=zip_code,
                    price=results[-1].price,
                    source=results[-1].source,
                )
    finally:
        await client.shutdown()

    live = sum(1 for r in results if r.source == "real_data")
    average_ms = sum(r.duration_ms for r in results) / len(results) if results else 0.0
    logger.info(
        "Smoke test complete",
        lookups=len(results),
        live=live,
        fallback=len(results) - live,
        average_ms=round(average_ms, 1),
    )
    logger.info(scraper.budget_report())
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run()))
