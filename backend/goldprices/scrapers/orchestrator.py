"""Scrape cycle orchestration.

The orchestrator owns the per-vendor result cache and the live progress
table. It runs every vendor concurrently, allows one cycle at a time, and
keeps serving a vendor's last good snapshot when a later scrape fails.
"""

import asyncio
from typing import Dict, List, Optional, Sequence, Set

import structlog
import httpx

from goldprices.config import Settings, settings
from goldprices.core.exceptions import UnknownRunnerError, VendorNotFoundError
from goldprices.scrapers.base import (
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_PENDING,
    STATUS_SCRAPING,
    ProgressRecord,
    ScrapeOutcome,
    VendorSnapshot,
)
from goldprices.scrapers.fetcher import Fetcher
from goldprices.scrapers.registry import ExtractorRegistry, get_extractor_registry
from goldprices.scrapers.runner import VendorRunner


logger = structlog.get_logger(__name__)

UNKNOWN_VENDOR = "unknown"


class ScrapeOrchestrator:
    """Runs scrape cycles over all configured vendors.

    This orchestrator:
    - Runs one task per vendor concurrently within a cycle
    - Rejects a cycle trigger while another cycle is running
    - Runs each vendor at most once at a time; a cycle joins a vendor run
      already started on demand
    - Replaces a vendor's cached snapshot only on success
    - Tracks live progress and clears it a few seconds after a cycle

    All state is mutated from the event loop only, so plain dicts and a
    boolean flag are enough; there is no await between checking and
    setting the running flag.
    """

    def __init__(self, runners: Sequence[VendorRunner], progress_clear_delay: Optional[float] = 3.0):
        """Initialize the orchestrator.

        Args:
            runners: One runner per vendor, keyed by their vendor name
            progress_clear_delay: Seconds before the progress table is
                cleared after a cycle; None keeps it
        """
        self._runners: Dict[str, VendorRunner] = {runner.vendor: runner for runner in runners}
        self.progress_clear_delay = progress_clear_delay
        self.logger = logger.bind(service="scrape_orchestrator")

        self._snapshots: Dict[str, VendorSnapshot] = {}
        self._progress: Dict[str, ProgressRecord] = {}
        self._running = False
        self._in_flight: Dict[str, asyncio.Task] = {}
        self._generation = 0
        self._clear_handle: Optional[asyncio.TimerHandle] = None
        self._background_tasks: Set[asyncio.Task] = set()

    @property
    def vendors(self) -> List[str]:
        """Names of all known vendors."""
        return list(self._runners)

    @property
    def is_running(self) -> bool:
        """Whether a cycle is in flight."""
        return self._running

    async def run_cycle(self) -> List[ScrapeOutcome]:
        """Scrape every vendor once, concurrently.

        If a cycle is already running, nothing is started and the cached
        results are returned immediately.

        Returns:
            One outcome per vendor in this cycle
        """
        if self._running:
            self.logger.info("cycle_already_running")
            return self.get_outcomes()

        self._running = True
        self._generation += 1
        generation = self._generation

        try:
            self._progress = {
                name: (
                    self._progress[name]
                    if self._active_task(name) is not None and name in self._progress
                    else ProgressRecord(vendor=name, status=STATUS_PENDING, progress=0)
                )
                for name in self._runners
            }
            self.logger.info("cycle_started", vendors=len(self._runners))

            results = await asyncio.gather(
                *(self._start_runner(runner) for runner in self._runners.values()),
                return_exceptions=True,
            )

            outcomes = []
            for result in results:
                if isinstance(result, BaseException):
                    self.logger.error("runner_task_failed", error=str(result))
                    outcomes.append(_unknown_failure(result))
                else:
                    outcomes.append(result)

            self.logger.info(
                "cycle_completed",
                succeeded=sum(1 for o in outcomes if o.success),
                failed=sum(1 for o in outcomes if not o.success),
            )
            return outcomes
        finally:
            self._running = False
            self._schedule_progress_clear(generation)

    def start_cycle(self) -> Optional[asyncio.Task]:
        """Start a cycle in the background without waiting for it.

        Returns:
            The cycle task, or None if a cycle is already running
        """
        if self._running:
            self.logger.info("cycle_already_running")
            return None

        task = asyncio.create_task(self._run_cycle_logged())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def _run_cycle_logged(self) -> None:
        try:
            await self.run_cycle()
        except Exception as e:
            self.logger.error("background_cycle_failed", error=str(e), exc_info=True)

    async def run_vendor(self, identifier: str) -> ScrapeOutcome:
        """Scrape a single vendor on demand.

        Args:
            identifier: Vendor name or slug, case-insensitive

        Returns:
            Outcome of the run; if the vendor is already being scraped, its
            cached snapshot (or a failure saying so) without a second run

        Raises:
            VendorNotFoundError: If no runner matches the identifier
        """
        runner = self._find_runner(identifier)
        if runner is None:
            raise VendorNotFoundError(identifier)

        name = runner.vendor
        if self._active_task(name) is not None:
            self.logger.info("vendor_scrape_already_running", vendor=name)
            snapshot = self._snapshots.get(name)
            if snapshot is not None:
                return ScrapeOutcome(vendor=name, success=True, data=snapshot)
            return ScrapeOutcome(vendor=name, success=False, error=f"Scrape already in progress for {name}")

        try:
            outcome = await asyncio.shield(self._start_runner(runner))
        except Exception as e:
            self.logger.error("runner_task_failed", vendor=name, error=str(e), exc_info=True)
            outcome = _unknown_failure(e)

        if not self._running:
            self._generation += 1
            self._schedule_progress_clear(self._generation)
        return outcome

    def get_snapshots(self) -> List[VendorSnapshot]:
        """Latest successful snapshot of every vendor that has one."""
        return list(self._snapshots.values())

    def get_outcomes(self) -> List[ScrapeOutcome]:
        """Cached snapshots reported as successful outcomes."""
        return [
            ScrapeOutcome(vendor=vendor, success=True, data=snapshot)
            for vendor, snapshot in self._snapshots.items()
        ]

    def get_progress(self) -> List[ProgressRecord]:
        """Current progress records, one per vendor of the latest run."""
        return list(self._progress.values())

    def _start_runner(self, runner: VendorRunner) -> asyncio.Task:
        """Task running the vendor, reusing the one already in flight."""
        name = runner.vendor
        task = self._active_task(name)
        if task is not None:
            self.logger.info("joined_in_flight_scrape", vendor=name)
            return task

        task = asyncio.create_task(self._run_runner(runner))
        self._in_flight[name] = task
        task.add_done_callback(lambda done: self._forget_in_flight(name, done))
        return task

    def _active_task(self, name: str) -> Optional[asyncio.Task]:
        task = self._in_flight.get(name)
        if task is None or task.done():
            return None
        return task

    def _forget_in_flight(self, name: str, task: asyncio.Task) -> None:
        if self._in_flight.get(name) is task:
            del self._in_flight[name]

    async def _run_runner(self, runner: VendorRunner) -> ScrapeOutcome:
        name = runner.vendor
        self._set_record(name, STATUS_SCRAPING, 0)

        try:
            outcome = await runner.run(on_progress=lambda value: self._on_progress(name, value))
        except Exception as e:
            self._set_record(name, STATUS_ERROR, 100, error=str(e))
            raise

        self._complete(name, outcome)
        return outcome

    def _complete(self, name: str, outcome: ScrapeOutcome) -> None:
        if outcome.success and outcome.data is not None:
            self._snapshots[name] = outcome.data
            self._set_record(name, STATUS_COMPLETED, 100)
        else:
            # Keep serving the previous snapshot
            self.logger.warning("vendor_scrape_failed", vendor=name, error=outcome.error)
            self._set_record(name, STATUS_ERROR, 100, error=outcome.error)

    def _on_progress(self, name: str, value: int) -> None:
        record = self._progress.get(name)
        if record is None or record.status != STATUS_SCRAPING:
            return
        self._set_record(name, STATUS_SCRAPING, value)

    def _set_record(self, name: str, status: str, progress: int, error: Optional[str] = None) -> None:
        self._progress[name] = ProgressRecord(vendor=name, status=status, progress=progress, error=error)

    def _schedule_progress_clear(self, generation: int) -> None:
        if self.progress_clear_delay is None:
            return
        if self._clear_handle is not None:
            self._clear_handle.cancel()
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(self.progress_clear_delay, self._clear_progress, generation)

    def _clear_progress(self, generation: int) -> None:
        self._clear_handle = None
        if generation != self._generation or self._running:
            self.logger.debug("progress_clear_skipped", generation=generation)
            return
        self._progress = {}

    def _find_runner(self, identifier: str) -> Optional[VendorRunner]:
        wanted = identifier.strip().lower()
        for runner in self._runners.values():
            if runner.vendor.lower() == wanted or getattr(runner, "slug", "").lower() == wanted:
                return runner
        return None


def _unknown_failure(error: BaseException) -> ScrapeOutcome:
    return ScrapeOutcome(
        vendor=UNKNOWN_VENDOR,
        success=False,
        error=UnknownRunnerError(str(error) or error.__class__.__name__).message,
    )


def create_orchestrator(
    app_settings: Optional[Settings] = None,
    registry: Optional[ExtractorRegistry] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ScrapeOrchestrator:
    """Build an orchestrator for the configured vendors.

    Args:
        app_settings: Settings to use (defaults to the global settings)
        registry: Extractor registry (defaults to the global registry)
        transport: Optional httpx transport for the shared fetcher

    Returns:
        ScrapeOrchestrator with one runner per configured vendor
    """
    from goldprices.scrapers.register_adapters import register_all_extractors

    app_settings = app_settings or settings
    if registry is None:
        registry = get_extractor_registry()
        register_all_extractors()

    fetcher = Fetcher(
        timeout=app_settings.REQUEST_TIMEOUT_SECONDS,
        retry_attempts=app_settings.RETRY_ATTEMPTS,
        retry_delay=app_settings.RETRY_DELAY_SECONDS,
        user_agent=app_settings.USER_AGENT,
        transport=transport,
    )

    runners = []
    for vendor in app_settings.VENDORS:
        runner = registry.create_runner(vendor, fetcher)
        if runner is None:
            logger.warning("vendor_skipped", vendor=vendor.name, slug=vendor.slug)
            continue
        runners.append(runner)

    logger.info("orchestrator_created", vendors=[runner.vendor for runner in runners])
    return ScrapeOrchestrator(runners, progress_clear_delay=app_settings.PROGRESS_CLEAR_DELAY_SECONDS)
