"""Run the API locally with auto-reload."""

import uvicorn

from price_scraper.core.config import get_settings


def main() -> None:
    """Serve ``price_scraper.main:app`` on the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "price_scraper.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=True,
    )


if __name__ == "__main__":
    main()
