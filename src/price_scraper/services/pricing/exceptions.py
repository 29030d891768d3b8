"""Pricing service exceptions."""

from __future__ import annotations


class PricingError(Exception):
    """Base exception for pricing errors."""


class PriceParseError(PricingError):
    """Raised when a scraped page cannot be turned into a price.

    Signals that the target page changed shape rather than a network
    problem; callers fall back to synthetic data without retrying.
    """

    def __init__(self, product: str, payload_length: int) -> None:
        """Initialize the exception.

        Args:
            product: Product being priced.
            payload_length: Length of the rejected payload.
        """
        self.product = product
        self.payload_length = payload_length
        super().__init__(
            f"Unusable payload for '{product}' ({payload_length} characters)"
        )
