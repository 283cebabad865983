"""Scraping engine for gold bar vendor price lists.

This package provides:
- Base extractor class and the shared price data structures
- Vendor-specific extractors and generic extraction strategies
- Fetcher, per-vendor runner and the cycle orchestrator
- Scheduler for periodic scrape cycles
"""

from .base import (
    BaseExtractor,
    PriceEntry,
    VendorSnapshot,
    ScrapeOutcome,
    ProgressRecord,
)
from .registry import ExtractorRegistry, extractor_registry, get_extractor_registry

__all__ = [
    # Base classes
    "BaseExtractor",
    # Data structures
    "PriceEntry",
    "VendorSnapshot",
    "ScrapeOutcome",
    "ProgressRecord",
    # Registry
    "ExtractorRegistry",
    "extractor_registry",
    "get_extractor_registry",
]
