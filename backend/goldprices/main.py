"""Gold Prices Backend -- FastAPI Application Entry Point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from goldprices.api.v1 import health
from goldprices.api.v1.router import api_router
from goldprices.config import settings
from goldprices.logging_config import configure_logging
from goldprices.scrapers.orchestrator import create_orchestrator
from goldprices.scrapers.scheduler import ScrapeScheduler

configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    # Startup
    logger.info("starting_api_server", environment=settings.ENVIRONMENT, debug=settings.DEBUG)

    orchestrator = create_orchestrator(settings)
    app.state.orchestrator = orchestrator
    app.state.scheduler = None

    # Initial cycle runs in the background; readiness never waits for it
    if settings.ENVIRONMENT != "test":
        orchestrator.start_cycle()
        logger.info("initial_cycle_started", vendors=orchestrator.vendors)

    if settings.SCHEDULER_ENABLED and settings.ENVIRONMENT != "test":
        scheduler = ScrapeScheduler(orchestrator, interval_minutes=settings.SCRAPE_INTERVAL_MINUTES)
        try:
            scheduler.start()
            app.state.scheduler = scheduler
        except Exception as e:
            logger.error("scheduler_start_failed", error=str(e), exc_info=True)
    else:
        logger.info("scheduler_disabled")

    yield

    # Shutdown
    logger.info("shutting_down_api_server")
    if app.state.scheduler:
        app.state.scheduler.stop()


app = FastAPI(
    title="Gold Prices API",
    description="Gold bar price aggregator for Croatian vendors",
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["health"])
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Gold Prices API",
        "version": "0.1.0",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/health",
        "prices": "/api/prices",
    }
