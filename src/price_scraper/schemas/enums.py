"""Enumerations shared across schemas and services."""

from __future__ import annotations

from enum import StrEnum


class PriceSource(StrEnum):
    """Provenance of a price record.

    ``REAL_DATA`` records were derived from a live extraction response;
    ``FALLBACK`` records were synthesized from static tables.
    """

    REAL_DATA = "real_data"
    FALLBACK = "fallback"


class PromotionType(StrEnum):
    """Kinds of in-store promotion."""

    SALE = "sale"
    BOGO = "bogo"
    DIGITAL_COUPON = "digital_coupon"
    LOYALTY = "loyalty"


class StoreChain(StrEnum):
    """Florida grocery chains in the store directory."""

    PUBLIX = "publix"
    WINN_DIXIE = "winn-dixie"
    WHOLE_FOODS = "whole-foods"
    WALMART = "walmart"
    TARGET = "target"
    ALDI = "aldi"


class HealthStatus(StrEnum):
    """Component health states."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    NOT_CONFIGURED = "not_configured"
