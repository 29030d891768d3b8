"""Florida store directory and distance helpers."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Final

from price_scraper.schemas.comparison import (
    NearbyStore,
    OpeningHours,
    Store,
    StoreServices,
)
from price_scraper.schemas.enums import StoreChain


if TYPE_CHECKING:
    from collections.abc import Sequence

    from price_scraper.schemas.comparison import GeoLocation


EARTH_RADIUS_MILES: Final[float] = 3959.0

_WEEKDAYS: Final[tuple[str, ...]] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)


def _weekly_hours(
    weekday: tuple[str, str],
    sunday: tuple[str, str],
) -> dict[str, OpeningHours]:
    hours = {day: OpeningHours(open=weekday[0], close=weekday[1]) for day in _WEEKDAYS}
    hours["sunday"] = OpeningHours(open=sunday[0], close=sunday[1])
    return hours


_FULL_SERVICE = StoreServices(pickup=True, delivery=True, pharmacy=True, deli=True)

FLORIDA_STORES: Final[tuple[Store, ...]] = (
    Store(
        id="publix-miami-001",
        name="Publix Super Market at Brickell City Centre",
        chain=StoreChain.PUBLIX,
        address="701 S Miami Ave, Miami, FL 33130",
        latitude=25.7617,
        longitude=-80.1918,
        zip_code="33130",
        phone="(305) 808-9090",
        hours=_weekly_hours(("7:00", "23:00"), ("7:00", "22:00")),
        services=_FULL_SERVICE,
    ),
    Store(
        id="publix-orlando-001",
        name="Publix Super Market at Lake Buena Vista",
        chain=StoreChain.PUBLIX,
        address="12541 State Road 535, Orlando, FL 32836",
        latitude=28.3772,
        longitude=-81.5707,
        zip_code="32836",
        phone="(407) 827-1200",
        hours=_weekly_hours(("6:00", "23:00"), ("7:00", "22:00")),
        services=_FULL_SERVICE,
    ),
    Store(
        id="winn-dixie-tampa-001",
        name="Winn-Dixie #1234",
        chain=StoreChain.WINN_DIXIE,
        address="4748 W Neptune St, Tampa, FL 33629",
        latitude=27.9506,
        longitude=-82.5369,
        zip_code="33629",
        phone="(813) 282-1234",
        hours=_weekly_hours(("6:00", "23:00"), ("7:00", "22:00")),
        services=_FULL_SERVICE,
    ),
    Store(
        id="whole-foods-miami-001",
        name="Whole Foods Market - Brickell",
        chain=StoreChain.WHOLE_FOODS,
        address="1020 Brickell Ave, Miami, FL 33131",
        latitude=25.7617,
        longitude=-80.1918,
        zip_code="33131",
        phone="(305) 456-7890",
        hours=_weekly_hours(("7:00", "22:00"), ("8:00", "21:00")),
        services=StoreServices(pickup=True, delivery=True, pharmacy=False, deli=True),
    ),
)


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points, in miles."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class StoreDirectory:
    """Read-only lookup over a fixed set of stores."""

    def __init__(self, stores: Sequence[Store] = FLORIDA_STORES) -> None:
        self._stores = tuple(stores)

    @property
    def stores(self) -> tuple[Store, ...]:
        return self._stores

    def find_nearby(self, location: GeoLocation, radius_miles: float) -> list[NearbyStore]:
        """Stores within ``radius_miles`` of ``location``, closest first."""
        nearby = [
            NearbyStore(
                store=store,
                distance_miles=haversine_miles(
                    location.latitude, location.longitude, store.latitude, store.longitude
                ),
            )
            for store in self._stores
        ]
        return sorted(
            (n for n in nearby if n.distance_miles <= radius_miles),
            key=lambda n: n.distance_miles,
        )

    def get(self, store_id: str) -> Store | None:
        return next((s for s in self._stores if s.id == store_id), None)

    def by_chain(self, chain: StoreChain) -> list[Store]:
        return [s for s in self._stores if s.chain is chain]
