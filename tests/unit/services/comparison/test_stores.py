"""Unit tests for the store directory."""

from __future__ import annotations

import pytest

from price_scraper.schemas.comparison import GeoLocation
from price_scraper.schemas.enums import StoreChain
from price_scraper.services.comparison import StoreDirectory, haversine_miles


pytestmark = pytest.mark.unit

MIAMI = GeoLocation(latitude=25.7617, longitude=-80.1918, zip_code="33131", city="Miami")
TAMPA = GeoLocation(latitude=27.9506, longitude=-82.4572, zip_code="33602", city="Tampa")


class TestHaversine:
    def test_same_point_is_zero(self) -> None:
        assert haversine_miles(25.7617, -80.1918, 25.7617, -80.1918) == 0

    def test_miami_to_orlando(self) -> None:
        """Should be roughly 200 miles as the crow flies."""
        assert haversine_miles(25.7617, -80.1918, 28.3772, -81.5707) == pytest.approx(
            199.5, abs=10
        )


class TestStoreDirectory:
    def test_find_nearby_within_radius(self) -> None:
        nearby = StoreDirectory().find_nearby(MIAMI, 15)

        assert {n.store.id for n in nearby} == {"publix-miami-001", "whole-foods-miami-001"}
        assert all(n.distance_miles <= 15 for n in nearby)

    def test_find_nearby_sorted_by_distance(self) -> None:
        nearby = StoreDirectory().find_nearby(TAMPA, 500)

        distances = [n.distance_miles for n in nearby]
        assert distances == sorted(distances)
        assert nearby[0].store.id == "winn-dixie-tampa-001"

    def test_nothing_nearby(self) -> None:
        remote = GeoLocation(latitude=30.4383, longitude=-84.2807, zip_code="32301", city="Tallahassee")

        assert StoreDirectory().find_nearby(remote, 15) == []

    def test_get_and_by_chain(self) -> None:
        directory = StoreDirectory()

        store = directory.get("whole-foods-miami-001")
        assert store is not None
        assert store.services.pharmacy is False
        assert store.hours["sunday"].open == "8:00"
        assert directory.get("missing") is None
        assert [s.id for s in directory.by_chain(StoreChain.PUBLIX)] == [
            "publix-miami-001",
            "publix-orlando-001",
        ]
        assert directory.by_chain(StoreChain.ALDI) == []
