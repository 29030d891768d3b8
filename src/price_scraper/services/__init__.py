"""Domain services: budget accounting, price scraping, comparison."""
