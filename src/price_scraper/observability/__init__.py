"""Observability components."""

from price_scraper.observability.logging import (
    bind_context,
    clear_context,
    get_context,
    get_logger,
    logger,
    setup_logging,
    unbind_context,
)


__all__ = [
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "setup_logging",
    "unbind_context",
]
