"""Zyte client exceptions.

``ScrapeError`` subclasses are transient: the caller may retry them.
Budget refusals are raised as ``BudgetExceededError`` instead and must not
be retried.
"""

from __future__ import annotations

from enum import StrEnum


class ScrapeErrorKind(StrEnum):
    """Failure category of an extraction call."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP = "http"


class ZyteError(Exception):
    """Base exception for Zyte client errors."""


class ZyteConfigurationError(ZyteError):
    """Raised when the client cannot be built, e.g. no API key is set."""


class ScrapeError(ZyteError):
    """Raised when an extraction call fails."""

    kind: ScrapeErrorKind = ScrapeErrorKind.NETWORK

    def __init__(self, message: str, *, url: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            url: Target URL of the failed extraction.
        """
        self.url = url
        super().__init__(message)


class ScrapeNetworkError(ScrapeError):
    """Connection or transport failure."""

    kind = ScrapeErrorKind.NETWORK


class ScrapeTimeoutError(ScrapeError):
    """The extraction call exceeded its timeout."""

    kind = ScrapeErrorKind.TIMEOUT


class ScrapeHTTPError(ScrapeError):
    """The API answered with a non-2xx status."""

    kind = ScrapeErrorKind.HTTP

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        url: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            status_code: HTTP status returned by the API.
            url: Target URL of the failed extraction.
        """
        self.status_code = status_code
        super().__init__(message, url=url)
