"""Request and response payloads of the Zyte ``/v1/extract`` endpoint."""

from __future__ import annotations

import base64
import binascii
from typing import Any

from pydantic import Field

from price_scraper.schemas.base import DownstreamRequest, DownstreamResponse


class ExtractRequest(DownstreamRequest):
    """Body of an extract call.

    Serializes to the provider's camelCase field names
    (``httpResponseBody``, ``browserHtml``, ``echoData``).
    """

    url: str
    http_response_body: bool | None = True
    geolocation: str = "US"
    echo_data: dict[str, Any] | None = None
    browser_html: bool | None = None
    screenshot: bool | None = None

    @classmethod
    def for_browser(
        cls,
        url: str,
        *,
        echo_data: dict[str, Any] | None = None,
        geolocation: str = "US",
    ) -> ExtractRequest:
        """Build a request for a JavaScript-rendered page."""
        return cls(
            url=url,
            http_response_body=None,
            browser_html=True,
            echo_data=echo_data,
            geolocation=geolocation,
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body, omitting unset optional features."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ExtractResponse(DownstreamResponse):
    """Body of a successful extract call."""

    url: str
    status_code: int | None = None
    http_response_body: str | None = Field(
        default=None,
        description="Raw body, base64-encoded by the provider",
    )
    browser_html: str | None = None
    screenshot: str | None = None
    echo_data: dict[str, Any] | None = None

    def body_text(self) -> str:
        """Return the decoded response body, or ``""`` when absent.

        Bodies that are not valid base64 are returned unchanged.
        """
        if not self.http_response_body:
            return ""
        try:
            raw = base64.b64decode(self.http_response_body, validate=True)
        except (binascii.Error, ValueError):
            return self.http_response_body
        return raw.decode("utf-8", errors="replace")
