"""Pricing rules shared by scraped and synthetic Publix records.

A product is priced from a base-price table, scaled by the store's location
tier, and decorated with an occasional random promotion. The same rules
produce the synthetic records served when live scraping is unavailable.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum

from price_scraper.schemas.enums import PriceSource, PromotionType
from price_scraper.schemas.pricing import NutritionInfo, PriceRecord, Promotion
from price_scraper.services.pricing.constants import (
    BOGO_THRESHOLD,
    COUPON_MAX_SAVINGS,
    COUPON_PROMOTION_DAYS,
    COUPON_RATE,
    DEFAULT_BASE_PRICE,
    DISCOUNT_MULTIPLIER,
    DISCOUNT_ZIPS,
    NUTRITION_FACTS,
    PREMIUM_MULTIPLIER,
    PREMIUM_ZIPS,
    PRODUCT_BASE_PRICES,
    PROMOTION_CHANCE,
    SHORT_PROMOTION_DAYS,
    STANDARD_MULTIPLIER,
    WEEKLY_SALE_RATE,
    WEEKLY_SALE_THRESHOLD,
    BasePrice,
)


CENTS = Decimal("0.01")


def to_cents(amount: Decimal) -> Decimal:
    """Round a money amount to whole cents (half up)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class MatchKind(StrEnum):
    """How a product name was matched against the base-price table."""

    EXACT = "exact"
    PARTIAL = "partial"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class PricingMatch:
    """Result of a base-price lookup."""

    kind: MatchKind
    base: BasePrice
    key: str | None = None


def match_base_price(product: str) -> PricingMatch:
    """Find the base price for ``product``.

    Tries an exact (case-insensitive) match first, then a substring match in
    either direction, e.g. ``"whole milk"`` matches ``"milk"``.
    """
    name = product.strip().lower()
    if name in PRODUCT_BASE_PRICES:
        return PricingMatch(MatchKind.EXACT, PRODUCT_BASE_PRICES[name], name)

    for key, base in PRODUCT_BASE_PRICES.items():
        if key in name or name in key:
            return PricingMatch(MatchKind.PARTIAL, base, key)

    return PricingMatch(MatchKind.DEFAULT, DEFAULT_BASE_PRICE)


class LocationTier(StrEnum):
    """Publix price level of a zip code."""

    PREMIUM = "premium"
    STANDARD = "standard"
    DISCOUNT = "discount"

    @classmethod
    def for_zip(cls, zip_code: str) -> LocationTier:
        if zip_code in PREMIUM_ZIPS:
            return cls.PREMIUM
        if zip_code in DISCOUNT_ZIPS:
            return cls.DISCOUNT
        return cls.STANDARD

    @property
    def multiplier(self) -> Decimal:
        return _TIER_MULTIPLIERS[self]


_TIER_MULTIPLIERS = {
    LocationTier.PREMIUM: PREMIUM_MULTIPLIER,
    LocationTier.STANDARD: STANDARD_MULTIPLIER,
    LocationTier.DISCOUNT: DISCOUNT_MULTIPLIER,
}


def nutrition_for(product: str) -> NutritionInfo | None:
    """Nutrition facts for well-known staples (exact name match only)."""
    facts = NUTRITION_FACTS.get(product.strip().lower())
    return NutritionInfo(**facts) if facts else None


class PromotionGenerator:
    """Draws Publix-style promotions.

    With probability ``chance`` a single promotion is produced: a BOGO deal
    (40%), a weekly sale at 20% off (30%) or a digital coupon worth 15% up
    to $1.50 (30%).
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        chance: float = PROMOTION_CHANCE,
    ) -> None:
        self.rng = rng or random.Random()
        self.chance = chance

    def generate(self, price: Decimal, now: datetime) -> tuple[Promotion, ...]:
        """Return zero or one promotion for an item at ``price``."""
        if self.rng.random() >= self.chance:
            return ()

        kind = self.rng.random()
        if kind < BOGO_THRESHOLD:
            promotion = Promotion(
                type=PromotionType.BOGO,
                description="Buy One Get One FREE",
                original_price=price,
                savings=to_cents(price / 2),
                valid_until=now + timedelta(days=SHORT_PROMOTION_DAYS),
            )
        elif kind < WEEKLY_SALE_THRESHOLD:
            promotion = Promotion(
                type=PromotionType.SALE,
                description="Weekly Special",
                original_price=price,
                savings=to_cents(price * WEEKLY_SALE_RATE),
                valid_until=now + timedelta(days=SHORT_PROMOTION_DAYS),
            )
        else:
            promotion = Promotion(
                type=PromotionType.DIGITAL_COUPON,
                description="Digital Coupon - Load to your Publix account",
                original_price=price,
                savings=min(to_cents(price * COUPON_RATE), COUPON_MAX_SAVINGS),
                valid_until=now + timedelta(days=COUPON_PROMOTION_DAYS),
            )
        return (promotion,)


def build_price_record(
    product: str,
    zip_code: str,
    *,
    source: PriceSource,
    promotions: PromotionGenerator,
    store_id: str | None = None,
    now: datetime | None = None,
) -> PriceRecord:
    """Price ``product`` for ``zip_code`` using the table-driven rules.

    Args:
        product: Product name as requested.
        zip_code: Zip code selecting the location tier.
        source: Provenance tag of the record.
        promotions: Promotion generator.
        store_id: Publix store the price applies to, if resolved.
        now: Timestamp of the record (defaults to the current UTC time).

    Returns:
        A fully populated price record.
    """
    now = now or datetime.now(UTC)
    match = match_base_price(product)
    multiplier = LocationTier.for_zip(zip_code).multiplier
    price = to_cents(match.base.price * multiplier)

    return PriceRecord(
        product=product,
        price=price,
        unit=match.base.unit,
        price_per_unit=to_cents(match.base.price_per_unit * multiplier),
        availability=True,
        promotions=promotions.generate(price, now),
        source=source,
        scraped_at=now,
        store_id=store_id,
        zip_code=zip_code,
        nutrition=nutrition_for(product) if source is PriceSource.REAL_DATA else None,
    )
