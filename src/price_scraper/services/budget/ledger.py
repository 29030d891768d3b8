"""Budget ledger for the extraction API.

Tracks cumulative and per-day spend against fixed caps. ``check_and_reserve``
holds the estimated cost of an in-flight call so concurrent callers cannot
overdraw a cap; ``commit`` turns the hold into spend once the paid call has
succeeded and ``release`` drops it when the call fails, so failed calls are
never billed.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from price_scraper.observability.logging import get_logger
from price_scraper.schemas.budget import BudgetStatus
from price_scraper.services.budget.constants import (
    BROWSER_HTML_MULTIPLIER,
    CRITICAL_REMAINING,
    DAILY_USAGE_ALERT_RATIO,
    DEFAULT_DAILY_CAP,
    DEFAULT_REQUEST_ESTIMATE,
    DEFAULT_TOTAL_CAP,
    HIGH_REQUEST_COUNT,
    SCREENSHOT_MULTIPLIER,
    SITE_COST_TIERS,
    UNKNOWN_SITE_COST,
    WARNING_REMAINING,
)
from price_scraper.services.budget.exceptions import BudgetExceededError, BudgetScope


if TYPE_CHECKING:
    from collections.abc import Callable


logger = get_logger(__name__)

_ZERO = Decimal(0)


def estimate_cost(
    target: str,
    *,
    browser_html: bool = False,
    screenshot: bool = False,
) -> Decimal:
    """Estimate the cost of extracting ``target``.

    Args:
        target: URL to be extracted.
        browser_html: Whether full browser rendering is requested.
        screenshot: Whether a screenshot is requested.

    Returns:
        Estimated cost in USD.
    """
    cost = next(
        (tier_cost for host, tier_cost in SITE_COST_TIERS if host in target),
        UNKNOWN_SITE_COST,
    )
    if browser_html:
        cost *= BROWSER_HTML_MULTIPLIER
    if screenshot:
        cost *= SCREENSHOT_MULTIPLIER
    return cost


@dataclass(frozen=True, slots=True)
class BudgetState:
    """Immutable snapshot of the ledger."""

    total_cap: Decimal
    daily_cap: Decimal
    daily_reset_key: date
    total_spent: Decimal = _ZERO
    daily_spent: Decimal = _ZERO
    request_count: int = 0
    reserved: Decimal = _ZERO
    halted: bool = False

    @property
    def remaining(self) -> Decimal:
        """Total budget left; zero once halted."""
        if self.halted:
            return _ZERO
        return self.total_cap - self.total_spent


def roll_if_new_day(state: BudgetState, today: date) -> BudgetState:
    """Return ``state`` with the daily window reset if ``today`` is a new day."""
    if state.daily_reset_key == today:
        return state
    return dataclasses.replace(state, daily_spent=_ZERO, daily_reset_key=today)


class BudgetLedger:
    """Gatekeeper for paid extraction requests.

    Example:
        ```python
        ledger = BudgetLedger()
        cost = estimate_cost("https://www.publix.com/search?q=milk")
        ledger.check_and_reserve(cost)  # raises BudgetExceededError
        try:
            ...  # perform the call
        except ScrapeError:
            ledger.release(cost)
            raise
        ledger.commit(cost)
        ```
    """

    def __init__(
        self,
        total_cap: Decimal = DEFAULT_TOTAL_CAP,
        daily_cap: Decimal = DEFAULT_DAILY_CAP,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initialize an empty ledger.

        Args:
            total_cap: Lifetime spend cap in USD.
            daily_cap: Per-calendar-day spend cap in USD.
            today: Returns the current calendar day.
        """
        self._today = today
        self._state = BudgetState(
            total_cap=Decimal(total_cap),
            daily_cap=Decimal(daily_cap),
            daily_reset_key=today(),
        )

    @property
    def state(self) -> BudgetState:
        """Current state, with the daily window rolled forward."""
        self._roll()
        return self._state

    def _roll(self) -> None:
        self._state = roll_if_new_day(self._state, self._today())

    def _violation(self, cost: Decimal) -> BudgetExceededError | None:
        self._roll()
        state = self._state
        if state.halted or state.total_spent + state.reserved + cost > state.total_cap:
            return BudgetExceededError(
                BudgetScope.TOTAL, cost, max(_ZERO, state.remaining - state.reserved)
            )
        if state.daily_spent + state.reserved + cost > state.daily_cap:
            return BudgetExceededError(
                BudgetScope.DAILY,
                cost,
                max(_ZERO, state.daily_cap - state.daily_spent - state.reserved),
            )
        return None

    def check_and_reserve(self, estimated_cost: Decimal) -> None:
        """Hold ``estimated_cost`` against both caps until commit or release.

        Raises:
            BudgetExceededError: If the total or daily cap would be exceeded.
        """
        error = self._violation(estimated_cost)
        if error is not None:
            logger.warning(
                "Budget check failed",
                scope=error.scope.value,
                estimated_cost=str(estimated_cost),
                available=str(error.available),
            )
            raise error
        self._state = dataclasses.replace(
            self._state, reserved=self._state.reserved + estimated_cost
        )

    def can_afford(self, estimated_cost: Decimal = DEFAULT_REQUEST_ESTIMATE) -> bool:
        """Non-raising variant of ``check_and_reserve``."""
        return self._violation(estimated_cost) is None

    def commit(self, actual_cost: Decimal, reserved: Decimal | None = None) -> None:
        """Record a successful paid request.

        Args:
            actual_cost: Amount to bill.
            reserved: Hold taken by ``check_and_reserve``; defaults to
                ``actual_cost``.
        """
        self._roll()
        self._state = dataclasses.replace(
            self._state,
            reserved=self._released(actual_cost if reserved is None else reserved),
            total_spent=self._state.total_spent + actual_cost,
            daily_spent=self._state.daily_spent + actual_cost,
            request_count=self._state.request_count + 1,
        )
        logger.debug(
            "Budget committed",
            cost=str(actual_cost),
            total_spent=str(self._state.total_spent),
            daily_spent=str(self._state.daily_spent),
            request_count=self._state.request_count,
        )

    def release(self, reserved: Decimal) -> None:
        """Drop the hold of a call that failed or was cancelled."""
        self._state = dataclasses.replace(self._state, reserved=self._released(reserved))

    def _released(self, amount: Decimal) -> Decimal:
        return max(_ZERO, self._state.reserved - amount)

    def halt(self) -> None:
        """Emergency stop: reject every further request."""
        self._state = dataclasses.replace(self._state, halted=True)
        logger.warning("Emergency stop activated - all further requests blocked")

    def snapshot(self) -> BudgetStatus:
        """Return the current spend figures."""
        state = self.state
        return BudgetStatus(
            used=state.total_cap - state.remaining,
            remaining=state.remaining,
            request_count=state.request_count,
            daily_spent=state.daily_spent,
            daily_budget=state.daily_cap,
        )

    def check_thresholds(self) -> BudgetStatus:
        """Log alerts for a low budget or heavy usage and return the snapshot."""
        status = self.snapshot()
        if status.remaining < CRITICAL_REMAINING:
            logger.critical(
                "Less than $0.50 of extraction budget remaining",
                remaining=str(status.remaining),
            )
        elif status.remaining < WARNING_REMAINING:
            logger.warning(
                "Less than $1.00 of extraction budget remaining",
                remaining=str(status.remaining),
            )

        if status.daily_spent > status.daily_budget * DAILY_USAGE_ALERT_RATIO:
            logger.info(
                "80% of daily extraction budget used",
                daily_spent=str(status.daily_spent),
            )
        if status.request_count > HIGH_REQUEST_COUNT:
            logger.info(
                "High extraction request count",
                request_count=status.request_count,
            )
        return status

    def format_report(self) -> str:
        """Render a human-readable budget report."""
        status = self.snapshot()
        average = (
            status.used / status.request_count if status.request_count else _ZERO
        )
        return "\n".join(
            [
                "Budget Report:",
                f"Total Used: ${status.used:.6f}",
                f"Total Remaining: ${status.remaining:.6f}",
                f"Daily Spent: ${status.daily_spent:.6f} / ${status.daily_budget:.2f}",
                f"Total Requests: {status.request_count}",
                f"Avg Cost/Request: ${average:.8f}",
            ]
        )
