"""End-to-end tests for the price lookup endpoints."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from tests.e2e.conftest import API


if TYPE_CHECKING:
    import respx
    from httpx import AsyncClient


pytestmark = pytest.mark.e2e


class TestSingleLookup:
    """Tests for GET /prices/{product}."""

    async def test_fallback_mode_returns_synthetic_price(self, client: AsyncClient) -> None:
        response = await client.get(f"{API}/prices/milk", params={"zipCode": "33130"})

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "fallback"
        assert Decimal(data["price"]) == Decimal("5.36")
        assert data["unit"] == "gallon"
        assert data["storeId"] == "0123"
        assert "pricePerUnit" in data
        assert "scrapedAt" in data

    async def test_live_lookup_returns_real_data(
        self, live_client: AsyncClient, zyte_mock: respx.MockRouter
    ) -> None:
        response = await live_client.get(f"{API}/prices/eggs", params={"zipCode": "33602"})

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "real_data"
        assert Decimal(data["price"]) == Decimal("3.79")
        assert data["nutrition"]["calories"] == 70
        assert zyte_mock.calls.call_count == 1

    async def test_unknown_zip_is_not_found(self, live_client: AsyncClient) -> None:
        response = await live_client.get(f"{API}/prices/milk", params={"zipCode": "00000"})

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "LOCATION_NOT_SERVED"
        assert data["requestId"] == response.headers["x-request-id"]

    async def test_unknown_zip_is_not_found_without_key(self, client: AsyncClient) -> None:
        response = await client.get(f"{API}/prices/milk", params={"zipCode": "00000"})

        assert response.status_code == 404
        assert response.json()["error"] == "LOCATION_NOT_SERVED"

    async def test_missing_zip_is_validation_error(self, client: AsyncClient) -> None:
        response = await client.get(f"{API}/prices/milk")

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert data["details"][0]["field"] == "query.zipCode"


class TestBatchLookup:
    """Tests for POST /prices/batch."""

    async def test_batch_results_align_with_products(self, live_client: AsyncClient) -> None:
        response = await live_client.post(
            f"{API}/prices/batch",
            json={"products": ["milk", "bread", "dragon fruit"], "zipCode": "32836"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["zipCode"] == "32836"
        assert [r["product"] for r in data["results"]] == ["milk", "bread", "dragon fruit"]
        assert data["results"][2]["unit"] == "each"

    async def test_batch_unknown_zip_yields_nulls(self, live_client: AsyncClient) -> None:
        response = await live_client.post(
            f"{API}/prices/batch",
            json={"products": ["milk"], "zipCode": "00000"},
        )

        assert response.status_code == 200
        assert response.json()["results"] == [None]

    async def test_empty_batch_rejected(self, client: AsyncClient) -> None:
        response = await client.post(
            f"{API}/prices/batch", json={"products": [], "zipCode": "33130"}
        )

        assert response.status_code == 422
