"""Register all vendor extractors with the registry.

This module should be imported during application startup to register
all available extractors with the extractor registry.
"""

import structlog

from goldprices.scrapers.registry import get_extractor_registry
from goldprices.scrapers.adapters import (
    CentarZlataExtractor,
    ElementumExtractor,
    GvsCroatiaExtractor,
    MoroExtractor,
    PlemenitExtractor,
)

logger = structlog.get_logger(__name__)

EXTRACTORS = [
    GvsCroatiaExtractor,
    PlemenitExtractor,
    MoroExtractor,
    CentarZlataExtractor,
    # Not in the default vendor list; enable through VENDORS
    ElementumExtractor,
]


def register_all_extractors() -> None:
    """Register all available extractors with the registry.

    This should be called during application startup.
    """
    registry = get_extractor_registry()

    for extractor_class in EXTRACTORS:
        try:
            registry.register_extractor(extractor_class.vendor_slug, extractor_class)
        except Exception as e:
            logger.error(
                "failed_to_register_extractor",
                vendor_slug=extractor_class.vendor_slug,
                error=str(e),
                exc_info=True,
            )

    logger.info(
        "extractors_registered",
        count=len(registry.get_registered_vendors()),
        vendors=registry.get_registered_vendors(),
    )
