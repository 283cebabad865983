"""API router -- aggregates all endpoint routers."""

from fastapi import APIRouter

from goldprices.api.v1 import prices

api_router = APIRouter()

api_router.include_router(prices.router, prefix="/prices", tags=["prices"])
