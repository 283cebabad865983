"""Single-vendor scrape: fetch, extract, refine, report."""

from datetime import datetime, timezone
from typing import Optional

import structlog

from goldprices.core.exceptions import ExtractionError, FetchError
from goldprices.scrapers.base import BaseExtractor, ProgressCallback, ScrapeOutcome, VendorSnapshot
from goldprices.scrapers.fetcher import Fetcher


logger = structlog.get_logger(__name__)

# Progress bands of one run (start, end)
PREPARE_BAND = (0, 10)
FETCH_BAND = (10, 40)
EXTRACT_BAND = (40, 80)
REFINE_BAND = (80, 95)


class ProgressTracker:
    """Forwards progress values, dropping any that would go backwards."""

    def __init__(self, on_progress: Optional[ProgressCallback] = None):
        self.on_progress = on_progress
        self.current = -1

    def report(self, value: float) -> None:
        value = max(0, min(100, int(value)))
        if value <= self.current:
            return
        self.current = value
        if self.on_progress is not None:
            self.on_progress(value)

    def within(self, band: tuple) -> ProgressCallback:
        """Callback mapping a nested 0-100 progress into a band."""
        start, end = band

        def report_scaled(value: int) -> None:
            self.report(start + (end - start) * max(0, min(100, value)) / 100)

        return report_scaled


class VendorRunner:
    """Runs one vendor's extractor against its live listing page.

    run() never raises; every failure becomes an unsuccessful
    ScrapeOutcome carrying the error message.
    """

    def __init__(self, vendor: str, url: str, extractor: BaseExtractor, fetcher: Fetcher):
        self.vendor = vendor
        self.slug = extractor.vendor_slug
        self.url = url
        self.extractor = extractor
        self.fetcher = fetcher
        self.logger = logger.bind(vendor=vendor)

    async def run(self, on_progress: Optional[ProgressCallback] = None) -> ScrapeOutcome:
        """Scrape the vendor once.

        Args:
            on_progress: Receives monotonic 0-100 progress values

        Returns:
            ScrapeOutcome with a fresh VendorSnapshot on success
        """
        tracker = ProgressTracker(on_progress)
        tracker.report(PREPARE_BAND[0])
        self.logger.info("vendor_scrape_started", url=self.url)
        tracker.report(PREPARE_BAND[1])

        try:
            html = await self._fetch(tracker)
            tracker.report(EXTRACT_BAND[0])
            entries = self._extract(html)
            tracker.report(EXTRACT_BAND[1])
            entries = await self._refine(entries, tracker)
            tracker.report(REFINE_BAND[1])
        except (FetchError, ExtractionError) as e:
            tracker.report(100)
            self.logger.warning("vendor_scrape_failed", error=e.message)
            return ScrapeOutcome(vendor=self.vendor, success=False, error=e.message)

        snapshot = VendorSnapshot(
            vendor=self.vendor,
            url=self.url,
            scraped_at=datetime.now(timezone.utc),
            prices=tuple(entries),
        )
        tracker.report(100)
        self.logger.info("vendor_scrape_completed", count=len(snapshot.prices))
        return ScrapeOutcome(vendor=self.vendor, success=True, data=snapshot)

    async def _fetch(self, tracker: ProgressTracker) -> str:
        try:
            return await self.fetcher.fetch(
                self.url,
                on_progress=tracker.within(FETCH_BAND),
                vendor=self.vendor,
            )
        except FetchError:
            raise
        except Exception as e:
            self.logger.error("fetch_unexpected_error", error=str(e), exc_info=True)
            raise FetchError(self.vendor, self.url, 1, str(e) or e.__class__.__name__) from e

    def _extract(self, html: str):
        try:
            return self.extractor.extract(html)
        except Exception as e:
            self.logger.error("extraction_failed", error=str(e), exc_info=True)
            raise ExtractionError(self.vendor, str(e) or e.__class__.__name__) from e

    async def _refine(self, entries, tracker: ProgressTracker):
        try:
            return await self.extractor.refine(
                entries,
                self.fetcher,
                on_progress=tracker.within(REFINE_BAND),
            )
        except Exception as e:
            self.logger.error("refinement_failed", error=str(e), exc_info=True)
            raise ExtractionError(self.vendor, str(e) or e.__class__.__name__) from e
