"""Budget status schemas surfaced to API callers."""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from price_scraper.schemas.base import APIResponse


class BudgetStatus(APIResponse):
    """Snapshot of extraction spend against the configured caps."""

    used: Decimal = Field(..., description="Total spent so far (USD)")
    remaining: Decimal = Field(..., description="Total budget left (USD)")
    request_count: int = Field(..., ge=0)
    daily_spent: Decimal = Field(..., description="Spent today (USD)")
    daily_budget: Decimal = Field(..., description="Daily cap (USD)")


class CacheStats(APIResponse):
    """Hit/miss counters for an in-memory result cache."""

    size: int
    hits: int
    misses: int
    hit_rate: float


class ScrapingStatus(APIResponse):
    """Whether live scraping is enabled, with budget and cache details."""

    enabled: bool
    budget_status: BudgetStatus | None = None
    cache: CacheStats | None = None
    error: str | None = None
