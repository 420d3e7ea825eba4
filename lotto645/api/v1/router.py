"""Aggregate API v1 router."""

from fastapi import APIRouter

from lotto645.api.v1.endpoints import (
    admin,
    draws,
    recommend,
    statistics,
)

api_router = APIRouter()

api_router.include_router(draws.router, prefix="/draws", tags=["Draws"])
api_router.include_router(statistics.router, prefix="/stats", tags=["Statistics"])
api_router.include_router(recommend.router, prefix="/recommend", tags=["Recommendation"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
