"""Request logging middleware."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from price_scraper.observability.logging import bind_context, get_logger


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp


logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its status code and duration."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        exclude_paths: set[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths or {"/favicon.ico"}

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if any(request.url.path.endswith(path) for path in self.exclude_paths):
            return await call_next(request)

        bind_context(
            method=request.method,
            path=request.url.path,
            client_ip=self._get_client_ip(request),
        )
        zip_code = request.query_params.get("zipCode")
        if zip_code:
            bind_context(zip_code=zip_code)
        logger.debug("Request started")

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        level = "WARNING" if response.status_code >= 500 else "INFO"
        logger.log(
            level,
            "Request completed",
            status_code=response.status_code,
            duration_ms=round(elapsed_ms, 2),
        )
        return response

    @staticmethod
    def _get_client_ip(request: Request) -> str:
        """Client IP, honouring ``X-Forwarded-For`` from reverse proxies."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"
