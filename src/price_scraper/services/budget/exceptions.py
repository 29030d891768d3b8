"""Budget exceptions.

Running out of budget is a hard stop for the attempted paid call, never a
transient error: callers must not retry and should switch to fallback data.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum


class BudgetScope(StrEnum):
    """Which cap a request would exceed."""

    TOTAL = "total"
    DAILY = "daily"


class BudgetExceededError(Exception):
    """Raised when an estimated request cost does not fit in a cap."""

    def __init__(
        self,
        scope: BudgetScope,
        estimated_cost: Decimal,
        available: Decimal,
    ) -> None:
        """Initialize the exception.

        Args:
            scope: The cap that would be exceeded.
            estimated_cost: Cost of the rejected request.
            available: Budget left in that scope.
        """
        self.scope = scope
        self.estimated_cost = estimated_cost
        self.available = available
        super().__init__(
            f"{scope.value.capitalize()} budget exceeded: request needs "
            f"${estimated_cost:.6f}, ${available:.6f} available"
        )
