"""Tests for the single-vendor runner."""

from decimal import Decimal
from typing import List, Sequence

from bs4 import BeautifulSoup

from goldprices.core.exceptions import FetchError
from goldprices.scrapers.adapters import MoroExtractor
from goldprices.scrapers.base import BaseExtractor, PriceEntry, Strategy
from goldprices.scrapers.runner import ProgressTracker, VendorRunner

URL = "https://www.moro.hr/kategorija-proizvoda/zlatne-poluge/"


class FakeFetcher:
    """Fetcher double returning fixed HTML or raising a fixed error."""

    def __init__(self, html: str = "", error: Exception = None):
        self.html = html
        self.error = error

    async def fetch(self, url, on_progress=None, vendor=None, attempts=None):
        if on_progress is not None:
            on_progress(0)
            on_progress(50)
        if self.error is not None:
            raise self.error
        if on_progress is not None:
            on_progress(100)
        return self.html


class BrokenExtractor(BaseExtractor):
    vendor_slug = "broken"
    vendor_name = "Broken"

    @property
    def strategies(self) -> Sequence[Strategy]:
        return (self.parse,)

    def parse(self, soup: BeautifulSoup) -> List[PriceEntry]:
        raise RuntimeError("bad markup")


class TestProgressTracker:
    """Tests for ProgressTracker."""

    def test_drops_backwards_values(self):
        values = []
        tracker = ProgressTracker(values.append)

        tracker.report(30)
        tracker.report(20)
        tracker.report(30)
        tracker.report(150)

        assert values == [30, 100]

    def test_band_scaling(self):
        values = []
        tracker = ProgressTracker(values.append)

        report = tracker.within((10, 40))
        report(0)
        report(50)
        report(100)

        assert values == [10, 25, 40]


class TestVendorRunner:
    """Tests for VendorRunner.run."""

    async def test_success(self, moro_html):
        runner = VendorRunner("Moro", URL, MoroExtractor(base_url=URL), FakeFetcher(html=moro_html))
        progress = []

        outcome = await runner.run(on_progress=progress.append)

        assert outcome.success is True
        assert outcome.error is None
        snapshot = outcome.data
        assert snapshot.vendor == "Moro"
        assert snapshot.url == URL
        assert snapshot.scraped_at.tzinfo is not None
        assert [e.price for e in snapshot.prices] == [Decimal("498.00"), Decimal("92450.00")]
        assert progress[0] == 0
        assert progress[-1] == 100
        assert progress == sorted(progress)

    def test_slug_from_extractor(self):
        runner = VendorRunner("Moro", URL, MoroExtractor(), FakeFetcher())
        assert runner.slug == "moro"

    async def test_fetch_failure(self):
        error = FetchError("Moro", URL, 3, "Server error '503 Service Unavailable'")
        runner = VendorRunner("Moro", URL, MoroExtractor(), FakeFetcher(error=error))
        progress = []

        outcome = await runner.run(on_progress=progress.append)

        assert outcome.success is False
        assert outcome.data is None
        assert outcome.error == "Failed to fetch Moro after 3 attempts: Server error '503 Service Unavailable'"
        assert progress[-1] == 100

    async def test_unexpected_fetch_error(self):
        runner = VendorRunner("Moro", URL, MoroExtractor(), FakeFetcher(error=RuntimeError("socket closed")))

        outcome = await runner.run()

        assert outcome.success is False
        assert outcome.error == "Failed to fetch Moro after 1 attempts: socket closed"

    async def test_extraction_failure(self):
        runner = VendorRunner("Broken", URL, BrokenExtractor(), FakeFetcher(html="<html></html>"))

        outcome = await runner.run()

        assert outcome.success is False
        assert outcome.error == "Extraction error for Broken: bad markup"

    async def test_page_without_prices(self):
        """An empty page is a successful scrape with no prices."""
        runner = VendorRunner("Moro", URL, MoroExtractor(), FakeFetcher(html="<html><body></body></html>"))

        outcome = await runner.run()

        assert outcome.success is True
        assert outcome.data.prices == ()
