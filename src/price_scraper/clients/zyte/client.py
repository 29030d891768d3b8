"""Async client for the Zyte extraction API.

Every call is gated by the budget ledger (no network traffic when a cap
would be exceeded) and throttled by a token bucket. The estimated cost is
committed only after a 2xx response.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, Final

import httpx
from pydantic import ValidationError

from price_scraper.cache.rate_limit import TokenBucketRateLimiter
from price_scraper.clients.zyte.exceptions import (
    ScrapeHTTPError,
    ScrapeNetworkError,
    ScrapeTimeoutError,
    ZyteConfigurationError,
)
from price_scraper.clients.zyte.models import ExtractRequest, ExtractResponse
from price_scraper.observability.logging import get_logger
from price_scraper.services.budget.constants import DEFAULT_REQUEST_ESTIMATE
from price_scraper.services.budget.ledger import BudgetLedger, estimate_cost


if TYPE_CHECKING:
    from decimal import Decimal

    from price_scraper.core.config import Settings
    from price_scraper.schemas.budget import BudgetStatus


logger = get_logger(__name__)

API_KEY_ENV: Final[str] = "ZYTE_API_KEY"


class ZyteClient:
    """Budget-aware client for ``POST /v1/extract``.

    Example:
        ```python
        client = ZyteClient(api_key, ledger=BudgetLedger())
        await client.initialize()
        html = await client.scrape_html("https://www.publix.com/search?q=milk")
        await client.shutdown()
        ```
    """

    DEFAULT_API_URL: Final[str] = "https://api.zyte.com/v1/extract"

    def __init__(
        self,
        api_key: str,
        *,
        ledger: BudgetLedger | None = None,
        rate_limiter: TokenBucketRateLimiter | None = None,
        http_client: httpx.AsyncClient | None = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        geolocation: str = "US",
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Zyte API key, sent as the basic-auth username.
            ledger: Budget ledger shared with other callers.
            rate_limiter: Token bucket shared with other callers.
            http_client: Optional pre-built HTTP client (not closed by us).
            api_url: Extract endpoint URL.
            timeout: Per-request timeout in seconds.
            geolocation: Default geolocation hint.
        """
        if not api_key:
            msg = "Zyte API key must not be empty"
            raise ZyteConfigurationError(msg)

        self._api_key = api_key
        self.ledger = ledger if ledger is not None else BudgetLedger()
        self.rate_limiter = rate_limiter if rate_limiter is not None else TokenBucketRateLimiter()
        self.api_url = api_url
        self.timeout = timeout
        self.geolocation = geolocation
        self._http = http_client
        self._owns_http_client = http_client is None

    async def initialize(self) -> None:
        """Create the HTTP client if one was not injected."""
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                auth=httpx.BasicAuth(self._api_key, ""),
                headers={"Content-Type": "application/json"},
            )
        logger.info("ZyteClient initialized", api_url=self.api_url)

    async def shutdown(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_http_client and self._http is not None:
            await self._http.aclose()
            self._http = None
        logger.debug("ZyteClient shutdown")

    async def extract(self, request: ExtractRequest) -> ExtractResponse:
        """Run one extraction.

        Args:
            request: Target URL and options.

        Returns:
            Parsed API response.

        Raises:
            BudgetExceededError: If the estimated cost does not fit (no call made).
            ScrapeTimeoutError: If the call timed out.
            ScrapeHTTPError: If the API answered with a non-2xx status.
            ScrapeNetworkError: On transport errors or an unreadable body.
        """
        cost = estimate_cost(
            request.url,
            browser_html=bool(request.browser_html),
            screenshot=bool(request.screenshot),
        )
        self.ledger.check_and_reserve(cost)
        try:
            result = await self._send(request, cost)
        except BaseException:
            self.ledger.release(cost)
            raise

        self.ledger.commit(cost)
        status = self.ledger.snapshot()
        logger.info(
            "Zyte extract succeeded",
            total_used=f"{status.used:.6f}",
            total_remaining=f"{status.remaining:.6f}",
            daily_spent=f"{status.daily_spent:.6f}",
            request_count=status.request_count,
        )
        return result

    async def _send(self, request: ExtractRequest, cost: Decimal) -> ExtractResponse:
        await self.rate_limiter.acquire()

        if self._http is None:
            await self.initialize()
        assert self._http is not None

        status = self.ledger.snapshot()
        logger.info(
            "Zyte extract request",
            request_number=status.request_count + 1,
            url=request.url,
            estimated_cost=f"{cost:.6f}",
            remaining_budget=f"{status.remaining:.6f}",
        )

        try:
            response = await self._http.post(
                self.api_url,
                json=request.to_payload(),
                auth=httpx.BasicAuth(self._api_key, ""),
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = ExtractResponse.model_validate(response.json())
        except httpx.TimeoutException as e:
            logger.warning("Zyte request timeout", url=request.url, timeout=self.timeout)
            msg = f"Zyte timeout after {self.timeout}s"
            raise ScrapeTimeoutError(msg, url=request.url) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Zyte request failed",
                url=request.url,
                status_code=e.response.status_code,
                detail=e.response.text[:200],
            )
            msg = f"Zyte returned {e.response.status_code}"
            raise ScrapeHTTPError(
                msg, status_code=e.response.status_code, url=request.url
            ) from e
        except httpx.RequestError as e:
            logger.warning("Zyte connection error", url=request.url, error=str(e))
            msg = f"Cannot reach Zyte: {e}"
            raise ScrapeNetworkError(msg, url=request.url) from e
        except (ValueError, ValidationError) as e:
            logger.warning("Zyte response unreadable", url=request.url, error=str(e))
            msg = f"Unreadable Zyte response: {e}"
            raise ScrapeNetworkError(msg, url=request.url) from e
        return result

    async def scrape_html(
        self,
        url: str,
        echo_data: dict[str, Any] | None = None,
    ) -> str:
        """Fetch a page's raw HTML."""
        response = await self.extract(
            ExtractRequest(url=url, echo_data=echo_data, geolocation=self.geolocation)
        )
        return response.body_text()

    async def scrape_browser(
        self,
        url: str,
        echo_data: dict[str, Any] | None = None,
    ) -> str:
        """Fetch a JavaScript-heavy page rendered in a browser."""
        response = await self.extract(
            ExtractRequest.for_browser(
                url, echo_data=echo_data, geolocation=self.geolocation
            )
        )
        return response.browser_html or ""

    def can_make_request(self, estimated_cost: Decimal = DEFAULT_REQUEST_ESTIMATE) -> bool:
        """Whether a request of ``estimated_cost`` fits both caps."""
        return self.ledger.can_afford(estimated_cost)

    def budget_status(self) -> BudgetStatus:
        """Current budget snapshot."""
        return self.ledger.snapshot()

    def stop_all_requests(self) -> None:
        """Block every further request."""
        self.ledger.halt()


def create_zyte_client(
    api_key: str | None = None,
    settings: Settings | None = None,
    *,
    ledger: BudgetLedger | None = None,
    rate_limiter: TokenBucketRateLimiter | None = None,
) -> ZyteClient:
    """Build a client from an explicit key, settings, or ``ZYTE_API_KEY``.

    Raises:
        ZyteConfigurationError: If no API key can be found.
    """
    key = api_key or (settings.ZYTE_API_KEY if settings else "") or os.getenv(API_KEY_ENV, "")
    if not key:
        msg = (
            "Zyte API key is required. Set the ZYTE_API_KEY environment "
            "variable or pass it explicitly."
        )
        raise ZyteConfigurationError(msg)

    if settings is None:
        return ZyteClient(key, ledger=ledger, rate_limiter=rate_limiter)

    if ledger is None:
        ledger = BudgetLedger(settings.budget.total_cap, settings.budget.daily_cap)
    if rate_limiter is None:
        rate_limiter = TokenBucketRateLimiter(
            settings.rate_limit.max_tokens, settings.rate_limit.refill_per_minute
        )
    return ZyteClient(
        key,
        ledger=ledger,
        rate_limiter=rate_limiter,
        api_url=settings.zyte.api_url,
        timeout=settings.zyte.timeout,
        geolocation=settings.zyte.geolocation,
    )
