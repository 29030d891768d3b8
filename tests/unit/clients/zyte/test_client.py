"""Unit tests for ZyteClient.

Tests cover:
- Request construction and authentication
- Budget gating before any network traffic
- Commit-on-success accounting
- Error mapping to typed scrape errors
"""

from __future__ import annotations

import asyncio
import base64
from decimal import Decimal

import httpx
import orjson
import pytest
import respx

from price_scraper.clients.zyte import (
    ExtractRequest,
    ExtractResponse,
    ScrapeErrorKind,
    ScrapeHTTPError,
    ScrapeNetworkError,
    ScrapeTimeoutError,
    ZyteClient,
    ZyteConfigurationError,
    create_zyte_client,
)
from price_scraper.core.config import Settings
from price_scraper.services.budget import BudgetExceededError, BudgetLedger
from tests.conftest import ZYTE_URL
from tests.fixtures.fakes import extract_response, publix_page


pytestmark = pytest.mark.unit

PUBLIX_URL = "https://www.publix.com/search?q=milk&storeid=0123"


class TestZyteClientInitialization:
    """Tests for construction and lifecycle."""

    def test_empty_api_key_rejected(self) -> None:
        """Should refuse to build a client without a key."""
        with pytest.raises(ZyteConfigurationError):
            ZyteClient("")

    async def test_initialize_is_idempotent(self) -> None:
        """Should keep the same HTTP client across initialize calls."""
        client = ZyteClient("key")
        await client.initialize()
        first = client._http
        await client.initialize()

        assert client._http is first
        await client.shutdown()
        assert client._http is None

    def test_factory_requires_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should raise when no key is passed, configured or exported."""
        monkeypatch.delenv("ZYTE_API_KEY", raising=False)

        with pytest.raises(ZyteConfigurationError, match="ZYTE_API_KEY"):
            create_zyte_client()

    def test_factory_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should fall back to the ZYTE_API_KEY environment variable."""
        monkeypatch.setenv("ZYTE_API_KEY", "from-env")

        client = create_zyte_client()

        assert client._api_key == "from-env"

    def test_factory_applies_settings(self) -> None:
        """Should size the ledger and limiter from settings."""
        settings = Settings(
            ZYTE_API_KEY="from-settings",
            budget={"total_cap": "2.50", "daily_cap": "0.50"},
            rate_limit={"max_tokens": 4, "refill_per_minute": 6},
        )

        client = create_zyte_client(settings=settings)

        assert client.ledger.state.total_cap == Decimal("2.50")
        assert client.ledger.state.daily_cap == Decimal("0.50")
        assert client.rate_limiter.max_tokens == 4
        assert client.rate_limiter.refill_period == 10.0


class TestExtractModels:
    """Tests for request/response payloads."""

    def test_request_payload_uses_provider_names(self) -> None:
        """Should serialize camelCase and omit unset features."""
        payload = ExtractRequest(url=PUBLIX_URL, echo_data={"product": "milk"}).to_payload()

        assert payload == {
            "url": PUBLIX_URL,
            "httpResponseBody": True,
            "geolocation": "US",
            "echoData": {"product": "milk"},
        }

    def test_browser_request_drops_raw_body(self) -> None:
        """Should ask for rendered HTML instead of the raw body."""
        payload = ExtractRequest.for_browser(PUBLIX_URL).to_payload()

        assert payload["browserHtml"] is True
        assert "httpResponseBody" not in payload

    def test_body_text_decodes_base64(self) -> None:
        """Should decode the base64 body."""
        encoded = base64.b64encode(b"<html>ok</html>").decode()
        response = ExtractResponse(url=PUBLIX_URL, http_response_body=encoded)

        assert response.body_text() == "<html>ok</html>"

    def test_body_text_passes_through_plain_text(self) -> None:
        """Should return bodies that are not base64 unchanged."""
        response = ExtractResponse(url=PUBLIX_URL, http_response_body="<html>")

        assert response.body_text() == "<html>"
        assert ExtractResponse(url=PUBLIX_URL).body_text() == ""


class TestExtract:
    """Tests for extract() and the scrape helpers."""

    @respx.mock
    async def test_success_commits_estimated_cost(
        self, zyte_client: ZyteClient, ledger: BudgetLedger
    ) -> None:
        """Should return the page and record the spend."""
        html = publix_page()
        route = respx.post(ZYTE_URL).mock(
            return_value=httpx.Response(200, json=extract_response(html, PUBLIX_URL))
        )

        result = await zyte_client.scrape_html(PUBLIX_URL, {"product": "milk"})

        assert result == html
        assert route.call_count == 1
        state = ledger.state
        assert state.total_spent == Decimal("0.0001")
        assert state.request_count == 1

    @respx.mock
    async def test_request_is_authenticated(self, zyte_client: ZyteClient) -> None:
        """Should send the API key as the basic-auth username."""
        route = respx.post(ZYTE_URL).mock(
            return_value=httpx.Response(200, json=extract_response(publix_page()))
        )

        await zyte_client.scrape_html(PUBLIX_URL)

        request = route.calls.last.request
        expected = base64.b64encode(b"test-api-key:").decode()
        assert request.headers["authorization"] == f"Basic {expected}"
        body = orjson.loads(request.content)
        assert body["url"] == PUBLIX_URL
        assert body["httpResponseBody"] is True

    @respx.mock
    async def test_budget_exceeded_makes_no_call(self, today) -> None:
        """Should refuse before touching the network."""
        ledger = BudgetLedger(Decimal("0.0001"), Decimal("1.00"), today=today)
        ledger.commit(Decimal("0.0001"))
        route = respx.post(ZYTE_URL).mock(return_value=httpx.Response(200, json={}))
        client = ZyteClient("key", ledger=ledger, api_url=ZYTE_URL)

        with pytest.raises(BudgetExceededError):
            await client.scrape_html(PUBLIX_URL)

        assert route.call_count == 0
        await client.shutdown()

    @respx.mock
    async def test_http_error_is_not_billed(
        self, zyte_client: ZyteClient, ledger: BudgetLedger
    ) -> None:
        """Should raise ScrapeHTTPError and leave the ledger untouched."""
        respx.post(ZYTE_URL).mock(return_value=httpx.Response(520, text="ban"))

        with pytest.raises(ScrapeHTTPError) as exc_info:
            await zyte_client.scrape_html(PUBLIX_URL)

        assert exc_info.value.status_code == 520
        assert exc_info.value.kind is ScrapeErrorKind.HTTP
        assert ledger.state.total_spent == 0
        assert ledger.state.request_count == 0

    @respx.mock
    async def test_timeout_maps_to_timeout_error(self, zyte_client: ZyteClient) -> None:
        """Should map httpx timeouts."""
        respx.post(ZYTE_URL).mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(ScrapeTimeoutError) as exc_info:
            await zyte_client.scrape_html(PUBLIX_URL)

        assert exc_info.value.kind is ScrapeErrorKind.TIMEOUT

    @respx.mock
    async def test_connection_error_maps_to_network_error(
        self, zyte_client: ZyteClient
    ) -> None:
        """Should map transport failures."""
        respx.post(ZYTE_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(ScrapeNetworkError):
            await zyte_client.scrape_html(PUBLIX_URL)

    @respx.mock
    async def test_unreadable_body_maps_to_network_error(
        self, zyte_client: ZyteClient, ledger: BudgetLedger
    ) -> None:
        """Should treat a non-JSON body as a failed call."""
        respx.post(ZYTE_URL).mock(return_value=httpx.Response(200, text="not json"))

        with pytest.raises(ScrapeNetworkError):
            await zyte_client.scrape_html(PUBLIX_URL)

        assert ledger.state.request_count == 0

    @respx.mock
    async def test_browser_request_costs_triple(
        self, zyte_client: ZyteClient, ledger: BudgetLedger
    ) -> None:
        """Should bill browser rendering at three times the base cost."""
        respx.post(ZYTE_URL).mock(
            return_value=httpx.Response(
                200, json={"url": PUBLIX_URL, "browserHtml": "<html>rendered</html>"}
            )
        )

        html = await zyte_client.scrape_browser(PUBLIX_URL)

        assert html == "<html>rendered</html>"
        assert ledger.state.total_spent == Decimal("0.0003")

    async def test_stop_all_requests_halts_ledger(self, zyte_client: ZyteClient) -> None:
        """Should block every further request."""
        assert zyte_client.can_make_request()

        zyte_client.stop_all_requests()

        assert not zyte_client.can_make_request()
        assert zyte_client.budget_status().remaining == 0


class TestConcurrentExtract:
    """Tests for budget holds across overlapping extractions."""

    @respx.mock
    async def test_overlapping_calls_cannot_overdraw_daily_cap(self, today) -> None:
        """Should admit only the calls whose cost fits while others are in flight."""
        ledger = BudgetLedger(Decimal("5.00"), Decimal("0.0001"), today=today)
        client = ZyteClient("key", ledger=ledger, api_url=ZYTE_URL)

        async def slow_page(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.01)
            return httpx.Response(200, json=extract_response(publix_page()))

        route = respx.post(ZYTE_URL).mock(side_effect=slow_page)

        results = await asyncio.gather(
            *(client.scrape_html(PUBLIX_URL) for _ in range(5)),
            return_exceptions=True,
        )
        await client.shutdown()

        assert sum(isinstance(r, str) for r in results) == 1
        assert sum(isinstance(r, BudgetExceededError) for r in results) == 4
        assert route.call_count == 1
        state = ledger.state
        assert state.daily_spent == Decimal("0.0001")
        assert state.daily_spent <= state.daily_cap
        assert state.reserved == 0

    @respx.mock
    async def test_failed_call_releases_hold(
        self, zyte_client: ZyteClient, ledger: BudgetLedger
    ) -> None:
        """Should free the held amount when the call fails."""
        respx.post(ZYTE_URL).mock(side_effect=httpx.ConnectError("down"))

        with pytest.raises(ScrapeNetworkError):
            await zyte_client.scrape_html(PUBLIX_URL)

        assert ledger.state.reserved == 0
        assert ledger.can_afford(ledger.state.daily_cap)
