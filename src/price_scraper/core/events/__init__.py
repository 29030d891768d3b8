"""Application lifecycle events."""

from price_scraper.core.events.lifespan import lifespan


__all__ = ["lifespan"]
