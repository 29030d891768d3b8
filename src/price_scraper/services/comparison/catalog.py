"""Static shelf prices per chain for stores that are not scraped live.

Records produced here are always tagged ``fallback``.
"""

from __future__ import annotations

import random
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from price_scraper.schemas.enums import PriceSource, PromotionType, StoreChain
from price_scraper.schemas.pricing import PriceRecord, Promotion
from price_scraper.services.pricing.fallback import nutrition_for, to_cents


if TYPE_CHECKING:
    from collections.abc import Mapping

    from price_scraper.schemas.comparison import Store


# (price, unit, price per unit) per chain
_Row = tuple[str, str, str]

CHAIN_PRICES: Final[Mapping[str, Mapping[StoreChain, _Row]]] = MappingProxyType(
    {
        "milk": {
            StoreChain.PUBLIX: ("4.79", "gallon", "4.79"),
            StoreChain.WINN_DIXIE: ("4.59", "gallon", "4.59"),
            StoreChain.WHOLE_FOODS: ("6.99", "gallon", "6.99"),
            StoreChain.WALMART: ("4.28", "gallon", "4.28"),
            StoreChain.TARGET: ("4.49", "gallon", "4.49"),
            StoreChain.ALDI: ("3.99", "gallon", "3.99"),
        },
        "bread": {
            StoreChain.PUBLIX: ("2.89", "loaf", "2.89"),
            StoreChain.WINN_DIXIE: ("2.49", "loaf", "2.49"),
            StoreChain.WHOLE_FOODS: ("4.99", "loaf", "4.99"),
            StoreChain.WALMART: ("1.98", "loaf", "1.98"),
            StoreChain.TARGET: ("2.29", "loaf", "2.29"),
            StoreChain.ALDI: ("1.89", "loaf", "1.89"),
        },
        "eggs": {
            StoreChain.PUBLIX: ("3.99", "dozen", "0.33"),
            StoreChain.WINN_DIXIE: ("3.79", "dozen", "0.32"),
            StoreChain.WHOLE_FOODS: ("5.99", "dozen", "0.50"),
            StoreChain.WALMART: ("3.48", "dozen", "0.29"),
            StoreChain.TARGET: ("3.69", "dozen", "0.31"),
            StoreChain.ALDI: ("2.99", "dozen", "0.25"),
        },
        "bananas": {
            StoreChain.PUBLIX: ("1.69", "lb", "1.69"),
            StoreChain.WINN_DIXIE: ("1.49", "lb", "1.49"),
            StoreChain.WHOLE_FOODS: ("1.99", "lb", "1.99"),
            StoreChain.WALMART: ("1.28", "lb", "1.28"),
            StoreChain.TARGET: ("1.39", "lb", "1.39"),
            StoreChain.ALDI: ("1.19", "lb", "1.19"),
        },
        "chicken breast": {
            StoreChain.PUBLIX: ("8.99", "lb", "8.99"),
            StoreChain.WINN_DIXIE: ("7.99", "lb", "7.99"),
            StoreChain.WHOLE_FOODS: ("12.99", "lb", "12.99"),
            StoreChain.WALMART: ("6.98", "lb", "6.98"),
            StoreChain.TARGET: ("7.49", "lb", "7.49"),
            StoreChain.ALDI: ("5.99", "lb", "5.99"),
        },
    }
)

UNIT_MULTIPLIERS: Final[Mapping[str, int]] = MappingProxyType(
    {"gallon": 1, "loaf": 1, "dozen": 12, "lb": 1, "oz": 16, "pack": 1}
)

PREMIUM_ZIPS: Final[frozenset[str]] = frozenset({"33131", "33130", "33109"})
AFFORDABLE_ZIPS: Final[frozenset[str]] = frozenset({"33569", "33615", "33618"})
PREMIUM_MULTIPLIER: Final[Decimal] = Decimal("1.15")
AFFORDABLE_MULTIPLIER: Final[Decimal] = Decimal("0.92")

SPECIAL_CHANCE: Final[float] = 0.2
SPECIAL_DISCOUNT: Final[Decimal] = Decimal("0.15")
SPECIAL_DAYS: Final[int] = 7
AVAILABILITY_RATE: Final[float] = 0.95


def location_multiplier(zip_code: str) -> Decimal:
    if zip_code in PREMIUM_ZIPS:
        return PREMIUM_MULTIPLIER
    if zip_code in AFFORDABLE_ZIPS:
        return AFFORDABLE_MULTIPLIER
    return Decimal(1)


class ChainPriceCatalog:
    """Prices a product at a store from the static chain table.

    A weekly special (15% off) applies with 20% probability and the item is
    reported out of stock 5% of the time.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def price(self, store: Store, product: str) -> PriceRecord | None:
        """Return a record, or None if the chain does not list ``product``."""
        name = product.strip().lower()
        row = CHAIN_PRICES.get(name, {}).get(store.chain)
        if row is None:
            return None

        base, unit, _ = row
        now = datetime.now(UTC)
        adjusted = Decimal(base) * location_multiplier(store.zip_code)

        promotions: tuple[Promotion, ...] = ()
        final = adjusted
        if self.rng.random() < SPECIAL_CHANCE:
            promotions = (
                Promotion(
                    type=PromotionType.SALE,
                    description="Weekly Special",
                    original_price=to_cents(adjusted),
                    savings=to_cents(adjusted * SPECIAL_DISCOUNT),
                    valid_until=now + timedelta(days=SPECIAL_DAYS),
                ),
            )
            final = adjusted * (1 - SPECIAL_DISCOUNT)

        return PriceRecord(
            product=product,
            price=to_cents(final),
            unit=unit,
            price_per_unit=to_cents(final / UNIT_MULTIPLIERS.get(unit, 1)),
            availability=self.rng.random() < AVAILABILITY_RATE,
            promotions=promotions,
            source=PriceSource.FALLBACK,
            scraped_at=now,
            store_id=store.id,
            zip_code=store.zip_code,
            nutrition=nutrition_for(name),
        )
