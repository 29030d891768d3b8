"""Zyte extraction API client package."""

from price_scraper.clients.zyte.client import ZyteClient, create_zyte_client
from price_scraper.clients.zyte.exceptions import (
    ScrapeError,
    ScrapeErrorKind,
    ScrapeHTTPError,
    ScrapeNetworkError,
    ScrapeTimeoutError,
    ZyteConfigurationError,
    ZyteError,
)
from price_scraper.clients.zyte.models import ExtractRequest, ExtractResponse


__all__ = [
    "ExtractRequest",
    "ExtractResponse",
    "ScrapeError",
    "ScrapeErrorKind",
    "ScrapeHTTPError",
    "ScrapeNetworkError",
    "ScrapeTimeoutError",
    "ZyteClient",
    "ZyteConfigurationError",
    "ZyteError",
    "create_zyte_client",
]
