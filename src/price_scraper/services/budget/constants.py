"""Cost model and alert thresholds for extraction requests.

Costs are coarse per-site estimates, not the provider's billed amounts.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Final


# =============================================================================
# Caps
# =============================================================================

DEFAULT_TOTAL_CAP: Final[Decimal] = Decimal("5.00")
DEFAULT_DAILY_CAP: Final[Decimal] = Decimal("1.00")

# Estimate used by callers that check affordability before knowing the target.
DEFAULT_REQUEST_ESTIMATE: Final[Decimal] = Decimal("0.0003")


# =============================================================================
# Per-site Cost Tiers
# =============================================================================
# Matched by substring against the target URL, first match wins.

SITE_COST_TIERS: Final[tuple[tuple[str, Decimal], ...]] = (
    ("publix.com", Decimal("0.0001")),
    ("winndixie.com", Decimal("0.0002")),
    ("wholefoodsmarket.com", Decimal("0.0005")),
)
UNKNOWN_SITE_COST: Final[Decimal] = Decimal("0.0003")

BROWSER_HTML_MULTIPLIER: Final[int] = 3
SCREENSHOT_MULTIPLIER: Final[int] = 2


# =============================================================================
# Alert Thresholds
# =============================================================================

CRITICAL_REMAINING: Final[Decimal] = Decimal("0.50")
WARNING_REMAINING: Final[Decimal] = Decimal("1.00")
DAILY_USAGE_ALERT_RATIO: Final[Decimal] = Decimal("0.8")
HIGH_REQUEST_COUNT: Final[int] = 100
