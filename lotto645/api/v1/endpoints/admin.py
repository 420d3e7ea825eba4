"""Maintenance endpoints: recalculation, repairs, scheduler status."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lotto645.api.deps import get_db
from lotto645.scheduler import get_scheduler_status
from lotto645.schemas.statistics import RecalculateResult, RepairResult
from lotto645.services import analysis_service

router = APIRouter()


@router.post("/recalculate", response_model=RecalculateResult)
async def recalculate(db: AsyncSession = Depends(get_db)):
    """Recompute snapshot statistics and catch up the per-draw tables."""
    return await analysis_service.recalculate_all(db)


@router.post("/rebuild", response_model=RecalculateResult)
async def rebuild(db: AsyncSession = Depends(get_db)):
    """Recompute the per-draw tables from scratch, e.g. after a draw correction."""
    return await analysis_service.recalculate_all(db, full_rebuild=True)


@router.post("/repair/{field}", response_model=RepairResult)
async def repair(field: str, db: AsyncSession = Depends(get_db)):
    """Re-derive a zero probability column from its count column."""
    return await analysis_service.repair_zero_prob(db, field)


@router.get("/scheduler")
async def scheduler_status():
    return get_scheduler_status()
