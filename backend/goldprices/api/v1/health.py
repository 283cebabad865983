"""Health check endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends

from goldprices.dependencies import get_orchestrator, get_scheduler
from goldprices.schemas import HealthCheckResponse
from goldprices.scrapers.orchestrator import ScrapeOrchestrator
from goldprices.scrapers.scheduler import ScrapeScheduler

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    orchestrator: ScrapeOrchestrator = Depends(get_orchestrator),
    scheduler: Optional[ScrapeScheduler] = Depends(get_scheduler),
):
    """Service health with per-vendor cache state.

    A vendor is "ok" once it has a cached snapshot and "empty" before
    its first successful scrape.
    """
    cached = {snapshot.vendor for snapshot in orchestrator.get_snapshots()}
    vendors = {name: "ok" if name in cached else "empty" for name in orchestrator.vendors}

    if scheduler is None:
        scheduler_state = "disabled"
    else:
        scheduler_state = "running" if scheduler.is_running() else "stopped"

    return HealthCheckResponse(status="ok", scheduler=scheduler_state, vendors=vendors)
