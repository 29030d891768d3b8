"""Health check schemas."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field

from price_scraper.schemas.base import APIResponse
from price_scraper.schemas.enums import HealthStatus


class HealthResponse(APIResponse):
    """Liveness response."""

    status: str = Field(..., examples=["healthy"])
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: str
    environment: str


class ReadinessResponse(HealthResponse):
    """Readiness response with dependency status."""

    dependencies: dict[str, HealthStatus] = Field(default_factory=dict)
