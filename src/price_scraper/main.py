"""Application entry point.

Usage:
    # Development with auto-reload
    uvicorn price_scraper.main:app --reload

    # Production
    uvicorn price_scraper.main:app --host 0.0.0.0 --port 8000
"""

from price_scraper.factory import create_app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    from price_scraper.core.config import get_settings

    settings = get_settings()

    uvicorn.run(
        "price_scraper.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.is_development,
        log_level=settings.logging.level.lower(),
    )
