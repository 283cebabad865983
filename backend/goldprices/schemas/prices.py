"""Gold price schemas.

Field names are camelCase on the wire ("regularPrice", "scrapedAt").
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serializing to camelCase and readable from dataclasses."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PriceEntryResponse(CamelModel):
    """One gold bar listing."""

    unit: str
    price: Optional[float] = None
    regular_price: Optional[float] = None
    discounted_price: Optional[float] = None
    buy_price: Optional[float] = None
    sell_price: Optional[float] = None
    product_title: Optional[str] = None
    product_link: Optional[str] = None
    weight: Optional[float] = None


class VendorSnapshotResponse(CamelModel):
    """Latest price list of one vendor."""

    vendor: str
    url: str
    scraped_at: datetime
    prices: List[PriceEntryResponse] = []
    error: Optional[str] = None


class ScrapeOutcomeResponse(CamelModel):
    """Result of one vendor run."""

    vendor: str
    success: bool
    data: Optional[VendorSnapshotResponse] = None
    error: Optional[str] = None


class ProgressRecordResponse(CamelModel):
    """Live progress of one vendor."""

    vendor: str
    status: str
    progress: int
    error: Optional[str] = None


class ProgressResponse(CamelModel):
    """Progress of the current or latest cycle."""

    is_scraping: bool
    progress: List[ProgressRecordResponse] = []
