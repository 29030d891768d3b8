"""E2E test fixtures.

Runs the FastAPI app in-process with its lifespan, through
``httpx.ASGITransport``. The extraction API is mocked with respx.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
import respx
from httpx import ASGITransport, AsyncClient

from price_scraper.core.config import Settings
from price_scraper.factory import create_app
from tests.conftest import ZYTE_URL
from tests.fixtures.fakes import extract_response, publix_page


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Iterator

    from fastapi import FastAPI


pytestmark = pytest.mark.e2e

API = "/api/v1/grocery-prices"


async def _running(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture
def zyte_mock() -> Iterator[respx.MockRouter]:
    """Extraction API answering every call with a plausible page."""
    with respx.mock(assert_all_called=False) as router:
        router.post(ZYTE_URL).mock(
            return_value=httpx.Response(200, json=extract_response(publix_page()))
        )
        yield router


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    """Client for an app without an API key (fallback-only mode)."""
    async for c in _running(create_app(Settings())):
        yield c


@pytest.fixture
async def live_client(zyte_mock: respx.MockRouter) -> AsyncGenerator[AsyncClient]:
    """Client for an app with live scraping against the mocked API."""
    async for c in _running(create_app(Settings(ZYTE_API_KEY="e2e-key"))):
        yield c
