"""Custom middleware components."""

from price_scraper.core.middleware.logging import LoggingMiddleware
from price_scraper.core.middleware.request_id import RequestIDMiddleware


__all__ = [
    "LoggingMiddleware",
    "RequestIDMiddleware",
]
