"""Gold bar price scraper and API."""

__version__ = "0.1.0"
