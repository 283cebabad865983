"""APScheduler-based scrape cycle scheduler.

This module triggers a scrape cycle on a fixed interval. Overlapping
triggers are harmless: the orchestrator rejects a cycle while another
one is running.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from goldprices.scrapers.orchestrator import ScrapeOrchestrator

logger = structlog.get_logger(__name__)

JOB_ID = "scrape_cycle"


class ScrapeScheduler:
    """Runs the orchestrator's scrape cycle periodically.

    This scheduler:
    - Starts and stops the background APScheduler
    - Registers a single interval job that never runs concurrently
    - Logs and swallows cycle errors so the job keeps firing
    """

    def __init__(self, orchestrator: ScrapeOrchestrator, interval_minutes: int = 5):
        """Initialize the scheduler.

        Args:
            orchestrator: Orchestrator whose cycle is triggered
            interval_minutes: Minutes between cycle triggers
        """
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        self.orchestrator = orchestrator
        self.interval_minutes = interval_minutes
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.logger = logger.bind(service="scrape_scheduler")

    def start(self) -> Optional[Job]:
        """Start the scheduler and register the interval job.

        The first scheduled run happens one interval from now; the
        startup cycle is triggered separately.

        Returns:
            The registered APScheduler Job, or None if already running
        """
        if self.scheduler.running:
            self.logger.warning("scheduler_already_running")
            return None

        self.scheduler.start()

        trigger = IntervalTrigger(
            minutes=self.interval_minutes,
            start_date=datetime.now(timezone.utc) + timedelta(minutes=self.interval_minutes),
            timezone="UTC",
        )
        job = self.scheduler.add_job(
            func=self._run_cycle_wrapper,
            trigger=trigger,
            id=JOB_ID,
            name="Scrape all vendors",
            replace_existing=True,
            max_instances=1,  # Prevent overlapping cycles
        )

        self.logger.info(
            "scheduler_started",
            interval_minutes=self.interval_minutes,
            next_run=job.next_run_time.isoformat() if job.next_run_time else None,
        )
        return job

    def stop(self) -> None:
        """Stop the scheduler without waiting for a running cycle."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.logger.info("scheduler_stopped")
        else:
            self.logger.warning("scheduler_not_running")

    async def _run_cycle_wrapper(self) -> None:
        """Job entry point; errors are logged, never raised."""
        try:
            outcomes = await self.orchestrator.run_cycle()
            self.logger.info(
                "scheduled_cycle_finished",
                succeeded=sum(1 for o in outcomes if o.success),
                failed=sum(1 for o in outcomes if not o.success),
            )
        except Exception as e:
            self.logger.error("scheduled_cycle_failed", error=str(e), exc_info=True)

    def get_job_status(self) -> dict:
        """Next run time and trigger of the cycle job.

        Returns:
            Dict with job information, empty if not scheduled
        """
        job = self.scheduler.get_job(JOB_ID)
        if not job:
            return {}
        return {
            "job_id": job.id,
            "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger),
        }

    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self.scheduler.running
