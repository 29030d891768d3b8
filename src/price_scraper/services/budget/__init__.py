"""Spend accounting for the paid extraction API."""

from price_scraper.services.budget.exceptions import BudgetExceededError, BudgetScope
from price_scraper.services.budget.ledger import (
    BudgetLedger,
    BudgetState,
    estimate_cost,
    roll_if_new_day,
)


__all__ = [
    "BudgetExceededError",
    "BudgetLedger",
    "BudgetScope",
    "BudgetState",
    "estimate_cost",
    "roll_if_new_day",
]
