"""HTTP error mapping.

Every error leaves the API with the same body:
``{"error", "message", "details", "requestId"}``. Scraping failures are
absorbed by the pricing service and normally never reach this layer; the
budget and upstream handlers below are a last line for callers that use
the client directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from price_scraper.clients.zyte.exceptions import ZyteError
from price_scraper.observability.logging import get_logger
from price_scraper.schemas.base import APIResponse
from price_scraper.services.budget.exceptions import BudgetExceededError


if TYPE_CHECKING:
    from fastapi import Request


logger = get_logger(__name__)


class ErrorDetail(APIResponse):
    """One item of an error's ``details`` list."""

    code: str
    message: str
    field: str | None = None


class ErrorResponse(APIResponse):
    """Body of every error response."""

    error: str
    message: str
    details: list[ErrorDetail] | None = None
    request_id: str | None = None


class AppException(Exception):
    """Base for errors raised deliberately by API handlers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: list[ErrorDetail] | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class StoreNotFoundException(AppException):
    """Store identifier is not in the directory."""

    status_code = status.HTTP_404_NOT_FOUND
    error = "STORE_NOT_FOUND"

    def __init__(self, store_id: str) -> None:
        self.store_id = store_id
        super().__init__(f"Store '{store_id}' not found")


class LocationNotServedException(AppException):
    """No Publix store is known for the requested zip code."""

    status_code = status.HTTP_404_NOT_FOUND
    error = "LOCATION_NOT_SERVED"

    def __init__(self, zip_code: str) -> None:
        self.zip_code = zip_code
        super().__init__(f"No Publix store is served for zip code '{zip_code}'")


class ServiceUnavailableException(AppException):
    """A component built at startup is missing."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "SERVICE_UNAVAILABLE"


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: list[ErrorDetail] | None = None,
) -> ORJSONResponse:
    body = ErrorResponse(
        error=error,
        message=message,
        details=details,
        request_id=getattr(request.state, "request_id", None),
    )
    return ORJSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> ORJSONResponse:
        return _error_response(request, exc.status_code, exc.error, exc.message, exc.details)

    @app.exception_handler(BudgetExceededError)
    async def budget_exception_handler(
        request: Request,
        exc: BudgetExceededError,
    ) -> ORJSONResponse:
        logger.warning("Budget exhausted during request", scope=exc.scope.value)
        detail = ErrorDetail(code=f"{exc.scope.value.upper()}_BUDGET", message=str(exc))
        return _error_response(
            request,
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "BUDGET_EXHAUSTED",
            "Scraping budget exhausted",
            [detail],
        )

    @app.exception_handler(ZyteError)
    async def upstream_exception_handler(request: Request, exc: ZyteError) -> ORJSONResponse:
        logger.warning("Upstream extraction failed", error=str(exc))
        return _error_response(
            request,
            status.HTTP_502_BAD_GATEWAY,
            "UPSTREAM_ERROR",
            "Price source unavailable",
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> ORJSONResponse:
        return _error_response(request, exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> ORJSONResponse:
        details = [
            ErrorDetail(
                code="VALIDATION_ERROR",
                message=err["msg"],
                field=".".join(str(part) for part in err["loc"]),
            )
            for err in exc.errors()
        ]
        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            details,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
        logger.opt(exception=exc).error("Unhandled exception")
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_SERVER_ERROR",
            "An unexpected error occurred",
        )
