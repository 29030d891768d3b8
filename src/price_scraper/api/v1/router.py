"""API v1 router aggregating all endpoint routers.

All endpoints are mounted under /api/v1/grocery-prices/ via the v1_prefix
configuration.
"""

from __future__ import annotations

from fastapi import APIRouter

from price_scraper.api.v1.endpoints import comparisons, health, prices, scraping, stores


router = APIRouter()

router.include_router(health.router)
router.include_router(prices.router)
router.include_router(comparisons.router)
router.include_router(stores.router)
router.include_router(scraping.router)
