"""Constants for Publix price scraping.

Contains:
- Publix store identifiers for served zip codes
- Base prices for common staples
- Location price tiers
- Promotion odds and validity windows
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING, Final


if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class PublixStore:
    """A Publix store reachable through the search page."""

    store_id: str
    name: str


@dataclass(frozen=True, slots=True)
class BasePrice:
    """Reference shelf price of a product before location adjustment."""

    price: Decimal
    unit: str
    price_per_unit: Decimal


def _store(store_id: str, area: str) -> PublixStore:
    return PublixStore(store_id=store_id, name=f"Publix Super Market at {area}")


def _price(price: str, unit: str, per_unit: str | None = None) -> BasePrice:
    return BasePrice(Decimal(price), unit, Decimal(per_unit or price))


# =============================================================================
# Search Endpoint
# =============================================================================

PUBLIX_SEARCH_URL: Final[str] = "https://www.publix.com/search?q={query}&storeid={store_id}"


# =============================================================================
# Served Zip Codes
# =============================================================================

PUBLIX_STORES_BY_ZIP: Final[Mapping[str, PublixStore]] = MappingProxyType(
    {
        # Miami
        "33130": _store("0123", "Brickell City Centre"),
        "33131": _store("0123", "Brickell City Centre"),
        "33132": _store("0124", "Downtown Miami"),
        "33133": _store("0125", "Coconut Grove"),
        "33134": _store("0126", "Coral Gables"),
        # Orlando
        "32836": _store("0567", "Lake Buena Vista"),
        "32837": _store("0568", "Dr. Phillips"),
        "32801": _store("0569", "Downtown Orlando"),
        "32803": _store("0570", "Winter Park"),
        # Tampa
        "33629": _store("0901", "Westshore"),
        "33602": _store("0902", "Downtown Tampa"),
        "33647": _store("0903", "New Tampa"),
        # Jacksonville
        "32202": _store("1234", "Downtown Jacksonville"),
        "32207": _store("1235", "San Marco"),
        # Fort Lauderdale
        "33301": _store("1567", "Las Olas"),
        "33304": _store("1568", "Victoria Park"),
    }
)


# =============================================================================
# Base Prices
# =============================================================================

PRODUCT_BASE_PRICES: Final[Mapping[str, BasePrice]] = MappingProxyType(
    {
        "milk": _price("4.79", "gallon"),
        "bread": _price("2.89", "loaf"),
        "eggs": _price("3.99", "dozen", "0.33"),
        "bananas": _price("1.69", "lb"),
        "chicken breast": _price("8.99", "lb"),
        "butter": _price("5.49", "pack"),
        "cheese": _price("4.99", "pack"),
        "yogurt": _price("1.29", "container"),
        "rice": _price("3.49", "bag", "0.22"),
        "pasta": _price("1.99", "box"),
        "tomatoes": _price("2.99", "lb"),
        "onions": _price("1.49", "lb"),
        "potatoes": _price("0.99", "lb"),
        "carrots": _price("1.99", "bag"),
        "apples": _price("1.99", "lb"),
        "oranges": _price("1.79", "lb"),
    }
)

DEFAULT_BASE_PRICE: Final[BasePrice] = _price("2.99", "each")


# =============================================================================
# Location Tiers
# =============================================================================

PREMIUM_ZIPS: Final[frozenset[str]] = frozenset({"33130", "33131", "33134", "32837"})
DISCOUNT_ZIPS: Final[frozenset[str]] = frozenset({"32202", "33602", "33647"})

PREMIUM_MULTIPLIER: Final[Decimal] = Decimal("1.12")
STANDARD_MULTIPLIER: Final[Decimal] = Decimal("1.00")
DISCOUNT_MULTIPLIER: Final[Decimal] = Decimal("0.95")


# =============================================================================
# Promotions
# =============================================================================

PROMOTION_CHANCE: Final[float] = 0.25
BOGO_THRESHOLD: Final[float] = 0.4
WEEKLY_SALE_THRESHOLD: Final[float] = 0.7

WEEKLY_SALE_RATE: Final[Decimal] = Decimal("0.20")
COUPON_RATE: Final[Decimal] = Decimal("0.15")
COUPON_MAX_SAVINGS: Final[Decimal] = Decimal("1.50")

SHORT_PROMOTION_DAYS: Final[int] = 7
COUPON_PROMOTION_DAYS: Final[int] = 14


# =============================================================================
# Nutrition (per serving)
# =============================================================================

NUTRITION_FACTS: Final[Mapping[str, Mapping[str, float]]] = MappingProxyType(
    {
        "milk": {"calories": 150, "protein": 8, "carbs": 12, "fat": 8, "sodium": 125},
        "bread": {"calories": 80, "protein": 4, "carbs": 15, "fat": 1, "sodium": 160},
        "eggs": {"calories": 70, "protein": 6, "carbs": 0, "fat": 5, "sodium": 70},
        "bananas": {"calories": 105, "protein": 1, "carbs": 27, "fat": 0, "sodium": 1},
        "chicken breast": {
            "calories": 165,
            "protein": 31,
            "carbs": 0,
            "fat": 3.6,
            "sodium": 74,
        },
        "butter": {"calories": 100, "protein": 0, "carbs": 0, "fat": 11, "sodium": 85},
    }
)
