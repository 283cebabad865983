"""Registry for creating vendor extractors and runners."""

from typing import Dict, List, Optional, Type

import structlog

from goldprices.config import VendorConfig
from goldprices.scrapers.base import BaseExtractor
from goldprices.scrapers.fetcher import Fetcher
from goldprices.scrapers.runner import VendorRunner


logger = structlog.get_logger(__name__)


class ExtractorRegistry:
    """Maps vendor slugs to extractor classes.

    Provides the single place where extractors are paired with a
    listing URL and a shared fetcher.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._extractor_registry: Dict[str, Type[BaseExtractor]] = {}

    def register_extractor(self, vendor_slug: str, extractor_class: Type[BaseExtractor]) -> None:
        """Register an extractor class for a vendor.

        Args:
            vendor_slug: Vendor slug identifier (e.g., "moro")
            extractor_class: Extractor class (must inherit from BaseExtractor)
        """
        if not issubclass(extractor_class, BaseExtractor):
            raise ValueError(f"Extractor class must inherit from BaseExtractor: {extractor_class}")

        self._extractor_registry[vendor_slug] = extractor_class
        logger.debug("extractor_registered", vendor_slug=vendor_slug)

    def create_extractor(self, vendor_slug: str, base_url: str = "") -> Optional[BaseExtractor]:
        """Create an extractor instance.

        Args:
            vendor_slug: Vendor slug identifier
            base_url: Listing page URL

        Returns:
            Extractor instance, or None if not registered
        """
        extractor_class = self._extractor_registry.get(vendor_slug)
        if not extractor_class:
            logger.warning("extractor_not_found", vendor_slug=vendor_slug)
            return None
        return extractor_class(base_url=base_url)

    def create_runner(self, vendor: VendorConfig, fetcher: Fetcher) -> Optional[VendorRunner]:
        """Pair a configured vendor with its extractor and the shared fetcher.

        Returns:
            VendorRunner, or None if no extractor is registered for the slug
        """
        extractor = self.create_extractor(vendor.slug, base_url=vendor.url)
        if extractor is None:
            return None
        return VendorRunner(vendor=vendor.name, url=vendor.url, extractor=extractor, fetcher=fetcher)

    def get_registered_vendors(self) -> List[str]:
        """Get list of registered vendor slugs."""
        return list(self._extractor_registry.keys())

    def has_extractor(self, vendor_slug: str) -> bool:
        """Check if an extractor is registered for a vendor."""
        return vendor_slug in self._extractor_registry


# Global registry instance
extractor_registry = ExtractorRegistry()


def get_extractor_registry() -> ExtractorRegistry:
    """Get the global extractor registry instance.

    Returns:
        ExtractorRegistry instance
    """
    return extractor_registry
