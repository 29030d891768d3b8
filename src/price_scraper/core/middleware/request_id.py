"""Request ID middleware.

Propagates an incoming ``X-Request-ID`` header, or generates one when the
header is missing or unusable. The ID is exposed on ``request.state`` and
the response, and bound to the logging context.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from price_scraper.observability.logging import bind_context, clear_context


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp


MAX_REQUEST_ID_LENGTH = 128


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request and response."""

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        clear_context()

        request_id = request.headers.get(self.header_name, "")
        usable = 0 < len(request_id) <= MAX_REQUEST_ID_LENGTH and request_id.isprintable()
        if not usable:
            request_id = uuid.uuid4().hex
        request.state.request_id = request_id
        bind_context(request_id=request_id)

        response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response
