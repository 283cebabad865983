"""FastAPI dependency injection providers."""

from typing import Optional

from fastapi import HTTPException, Request, status

from goldprices.scrapers.orchestrator import ScrapeOrchestrator
from goldprices.scrapers.scheduler import ScrapeScheduler


def get_orchestrator(request: Request) -> ScrapeOrchestrator:
    """Return the orchestrator created during application startup.

    Usage:
        @router.get("/prices")
        async def list_prices(orchestrator: ScrapeOrchestrator = Depends(get_orchestrator)):
            return orchestrator.get_snapshots()
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Scraper is not initialized",
        )
    return orchestrator


def get_scheduler(request: Request) -> Optional[ScrapeScheduler]:
    """Return the scrape scheduler, or None when scheduling is disabled."""
    return getattr(request.app.state, "scheduler", None)
