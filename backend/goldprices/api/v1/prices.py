"""Gold price endpoints."""

from typing import List

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from goldprices.core.exceptions import VendorNotFoundError
from goldprices.dependencies import get_orchestrator
from goldprices.schemas import (
    ProgressRecordResponse,
    ProgressResponse,
    ScrapeOutcomeResponse,
    VendorSnapshotResponse,
)
from goldprices.scrapers.orchestrator import ScrapeOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=List[VendorSnapshotResponse])
async def list_prices(orchestrator: ScrapeOrchestrator = Depends(get_orchestrator)):
    """Latest successful price list of every vendor."""
    return [VendorSnapshotResponse.model_validate(s) for s in orchestrator.get_snapshots()]


@router.post("/refresh", response_model=List[VendorSnapshotResponse])
async def refresh_prices(orchestrator: ScrapeOrchestrator = Depends(get_orchestrator)):
    """Start a scrape cycle in the background and return the cached prices.

    Poll /progress to follow the cycle.
    """
    started = orchestrator.start_cycle() is not None
    logger.info("refresh_requested", started=started)
    return [VendorSnapshotResponse.model_validate(s) for s in orchestrator.get_snapshots()]


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(orchestrator: ScrapeOrchestrator = Depends(get_orchestrator)):
    """Whether a cycle is running and the per-vendor progress."""
    return ProgressResponse(
        is_scraping=orchestrator.is_running,
        progress=[ProgressRecordResponse.model_validate(r) for r in orchestrator.get_progress()],
    )


@router.get("/results", response_model=List[ScrapeOutcomeResponse])
async def list_results(orchestrator: ScrapeOrchestrator = Depends(get_orchestrator)):
    """Cached results as per-vendor outcomes."""
    return [ScrapeOutcomeResponse.model_validate(o) for o in orchestrator.get_outcomes()]


@router.post("/{vendor}/refresh", response_model=ScrapeOutcomeResponse)
async def refresh_vendor(vendor: str, orchestrator: ScrapeOrchestrator = Depends(get_orchestrator)):
    """Scrape a single vendor now and wait for the result.

    Args:
        vendor: Vendor slug ("centar-zlata") or name ("Centar Zlata")
    """
    try:
        outcome = await orchestrator.run_vendor(vendor)
    except VendorNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    return ScrapeOutcomeResponse.model_validate(outcome)
