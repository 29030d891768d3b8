"""Application lifespan event handlers.

Builds the scraping components once per process at startup and releases
them at shutdown. Components live on ``app.state``:

- ``zyte_client``: live extraction client, or None in fallback-only mode
- ``price_scraper``: Publix price scraper
- ``comparison_service``: multi-store comparison service
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from price_scraper.cache.rate_limit import TokenBucketRateLimiter
from price_scraper.clients.zyte.client import create_zyte_client
from price_scraper.clients.zyte.exceptions import ZyteConfigurationError
from price_scraper.observability.logging import get_logger, setup_logging
from price_scraper.services.budget.ledger import BudgetLedger
from price_scraper.services.comparison.service import PriceComparisonService
from price_scraper.services.pricing.scraper import PriceScraper


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

    from price_scraper.clients.zyte.client import ZyteClient
    from price_scraper.core.config import Settings


logger = get_logger(__name__)


async def _startup(app: FastAPI, settings: Settings) -> None:
    """Initialize all application services during startup.

    Raises:
        ZyteConfigurationError: If live data is required but no API key is set.
    """
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )

    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        debug=settings.app.debug,
    )

    client = await _init_zyte_client(settings)
    app.state.zyte_client = client

    scraper = PriceScraper.from_settings(settings, client)
    app.state.price_scraper = scraper
    app.state.comparison_service = PriceComparisonService.from_settings(settings, scraper)

    logger.info("Application startup complete", live_scraping=scraper.live)


async def _init_zyte_client(settings: Settings) -> ZyteClient | None:
    """Create the extraction client, or None when no API key is configured."""
    if not settings.zyte_enabled:
        if settings.scraping.require_live_data:
            msg = "Live price data is required but ZYTE_API_KEY is not set"
            logger.error(msg)
            raise ZyteConfigurationError(msg)
        logger.warning("ZYTE_API_KEY not set - running in fallback-only mode")
        return None

    client = create_zyte_client(
        settings=settings,
        ledger=BudgetLedger(settings.budget.total_cap, settings.budget.daily_cap),
        rate_limiter=TokenBucketRateLimiter(
            settings.rate_limit.max_tokens, settings.rate_limit.refill_per_minute
        ),
    )
    await client.initialize()
    logger.info(
        "Zyte client configured",
        total_cap=str(settings.budget.total_cap),
        daily_cap=str(settings.budget.daily_cap),
        requests_per_minute=settings.rate_limit.refill_per_minute,
    )
    return client


async def _shutdown(app: FastAPI) -> None:
    """Release application resources."""
    logger.info("Shutting down application")

    scraper: PriceScraper | None = getattr(app.state, "price_scraper", None)
    if scraper is not None and scraper.live:
        logger.info("Final budget", report=scraper.budget_report())

    client: ZyteClient | None = getattr(app.state, "zyte_client", None)
    if client is not None:
        await client.shutdown()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None - control returns to the application to handle requests.
    """
    await _startup(app, app.state.settings)
    yield
    await _shutdown(app)
