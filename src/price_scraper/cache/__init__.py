"""In-process caching and outbound rate limiting."""

from price_scraper.cache.rate_limit import TokenBucketRateLimiter
from price_scraper.cache.ttl import ResultCache


__all__ = ["ResultCache", "TokenBucketRateLimiter"]
