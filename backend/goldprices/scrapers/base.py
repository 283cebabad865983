"""Base extractor interface and shared price data structures.

All vendor-specific extractors should inherit from BaseExtractor
and declare their ordered extraction strategies.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple

import structlog
from bs4 import BeautifulSoup

if TYPE_CHECKING:
    from goldprices.scrapers.fetcher import Fetcher


# Canonical weight units
GRAM = "gram"
KG = "kg"
OUNCE = "ounce"

# Progress status values
STATUS_PENDING = "pending"
STATUS_SCRAPING = "scraping"
STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"

ProgressCallback = Callable[[int], None]


def _is_positive(value: Optional[Decimal]) -> bool:
    return value is not None and value > 0


@dataclass(frozen=True)
class PriceEntry:
    """One priced gold bar listing, normalized across vendors."""

    unit: str  # 'gram', 'kg', 'ounce'
    price: Optional[Decimal] = None  # Effective price shown to a buyer
    regular_price: Optional[Decimal] = None  # Pre-discount list price
    discounted_price: Optional[Decimal] = None  # Sale price
    buy_price: Optional[Decimal] = None  # Vendor buys back at
    sell_price: Optional[Decimal] = None  # Vendor sells at
    product_title: Optional[str] = None
    product_link: Optional[str] = None  # Absolute URL
    weight: Optional[Decimal] = None  # Amount of `unit`, e.g. 100 for a 100 g bar

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.unit:
            raise ValueError("unit is required")
        if not (
            _is_positive(self.price)
            or _is_positive(self.sell_price)
            or _is_positive(self.buy_price)
        ):
            raise ValueError("one of price, sell_price or buy_price must be positive")
        if (
            self.regular_price is not None
            and self.discounted_price is not None
            and not self.discounted_price < self.regular_price
        ):
            raise ValueError("discounted_price must be lower than regular_price")


@dataclass
class VendorSnapshot:
    """Latest parsed price set for one vendor."""

    vendor: str
    url: str
    scraped_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    prices: Tuple[PriceEntry, ...] = ()
    error: Optional[str] = None

    def __post_init__(self):
        """Validate data after initialization."""
        self.prices = tuple(self.prices)
        if self.error and self.prices:
            raise ValueError("a snapshot carrying an error must not carry prices")


@dataclass
class ScrapeOutcome:
    """Externally reported result of one vendor run."""

    vendor: str
    success: bool
    data: Optional[VendorSnapshot] = None
    error: Optional[str] = None


@dataclass
class ProgressRecord:
    """Live progress of one vendor within a cycle."""

    vendor: str
    status: str = STATUS_PENDING  # 'pending', 'scraping', 'completed', 'error'
    progress: int = 0  # 0-100
    error: Optional[str] = None

    def __post_init__(self):
        """Validate data after initialization."""
        if self.status not in (STATUS_PENDING, STATUS_SCRAPING, STATUS_COMPLETED, STATUS_ERROR):
            raise ValueError(f"Invalid status: {self.status}")
        self.progress = max(0, min(100, int(self.progress)))


Strategy = Callable[[BeautifulSoup], List[PriceEntry]]


class BaseExtractor(ABC):
    """Abstract base class for all vendor extractors.

    Subclasses list their extraction strategies in priority order.
    extract() runs them in turn and keeps the output of the first
    strategy that finds anything.
    """

    vendor_slug: str = ""  # Must be overridden in subclass (e.g., "moro")
    vendor_name: str = ""  # Must be overridden in subclass (e.g., "Moro")

    def __init__(self, base_url: str = ""):
        """Initialize the extractor.

        Args:
            base_url: Listing page URL, used to absolutize product links
        """
        self.base_url = base_url
        self.logger = structlog.get_logger(__name__).bind(vendor=self.vendor_slug)

    @property
    @abstractmethod
    def strategies(self) -> Sequence[Strategy]:
        """Ordered extraction strategies, most specific first."""

    def extract(self, html: str) -> List[PriceEntry]:
        """Extract deduplicated price entries from a listing page.

        Args:
            html: Raw HTML document

        Returns:
            Entries from the first strategy that yields at least one
        """
        from goldprices.scrapers.utils.normalizer import dedupe_entries

        soup = BeautifulSoup(html, "html.parser")

        for strategy in self.strategies:
            entries = strategy(soup)
            if entries:
                self.logger.info(
                    "strategy_matched",
                    strategy=getattr(strategy, "__name__", repr(strategy)),
                    count=len(entries),
                )
                return dedupe_entries(entries)
            self.logger.debug("strategy_empty", strategy=getattr(strategy, "__name__", repr(strategy)))

        self.logger.warning("no_prices_extracted")
        return []

    async def refine(
        self,
        entries: List[PriceEntry],
        fetcher: "Fetcher",
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[PriceEntry]:
        """Post-process extracted entries, optionally with extra fetches.

        The default implementation returns the entries unchanged.
        """
        return entries
