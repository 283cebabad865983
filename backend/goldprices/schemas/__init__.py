"""Pydantic response schemas."""

from .health import HealthCheckResponse
from .prices import (
    PriceEntryResponse,
    ProgressResponse,
    ProgressRecordResponse,
    ScrapeOutcomeResponse,
    VendorSnapshotResponse,
)

__all__ = [
    "HealthCheckResponse",
    "PriceEntryResponse",
    "ProgressResponse",
    "ProgressRecordResponse",
    "ScrapeOutcomeResponse",
    "VendorSnapshotResponse",
]
