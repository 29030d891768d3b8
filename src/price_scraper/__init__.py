"""Budget-constrained grocery price scraping service for Florida stores."""

__version__ = "0.1.0"
