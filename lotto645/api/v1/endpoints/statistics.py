"""Statistics API endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lotto645.api.deps import get_db
from lotto645.services import analysis_service as analysis
from lotto645.schemas.statistics import (
    AnalysisRowSchema,
    BayesianStatsResponse,
    ColorStatsResponse,
    ConsecutiveStatsResponse,
    FirstLastStatsResponse,
    GridStatsResponse,
    NumberStatsResponse,
    PairStatsResponse,
    PosteriorRowSchema,
    RatioStatsResponse,
    ReappearStat,
)

router = APIRouter()


@router.get("/numbers", response_model=NumberStatsResponse)
async def number_stats(db: AsyncSession = Depends(get_db)):
    """Per-number frequency with chi-square uniformity p-value."""
    return await analysis.get_statistic(db, "numbers")


@router.get("/reappear", response_model=list[ReappearStat])
async def reappear_stats(db: AsyncSession = Depends(get_db)):
    return await analysis.get_statistic(db, "reappear")


@router.get("/first-last", response_model=FirstLastStatsResponse)
async def first_last_stats(db: AsyncSession = Depends(get_db)):
    return await analysis.get_statistic(db, "first_last")


@router.get("/pairs", response_model=PairStatsResponse)
async def pair_stats(
    top_n: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Most and least frequent co-occurring pairs."""
    return await analysis.get_statistic(db, "pairs", {"top_n": top_n})


@router.get("/consecutive", response_model=ConsecutiveStatsResponse)
async def consecutive_stats(db: AsyncSession = Depends(get_db)):
    return await analysis.get_statistic(db, "consecutive")


@router.get("/ratio", response_model=RatioStatsResponse)
async def ratio_stats(db: AsyncSession = Depends(get_db)):
    """Odd:even and high:low splits."""
    return await analysis.get_statistic(db, "ratio")


@router.get("/color", response_model=ColorStatsResponse)
async def color_stats(
    top_n: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await analysis.get_statistic(db, "color", {"top_n": top_n})


@router.get("/grid", response_model=GridStatsResponse)
async def grid_stats(
    top_n: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await analysis.get_statistic(db, "grid", {"top_n": top_n})


@router.get("/bayesian", response_model=BayesianStatsResponse)
async def bayesian_stats(
    window: int = Query(50, description="Number of most recent draws"),
    db: AsyncSession = Depends(get_db),
):
    """Windowed posterior with HOT/COLD classification."""
    return await analysis.get_statistic(db, "bayesian", {"window": window})


@router.get("/bayesian/draw/{draw_no}", response_model=list[PosteriorRowSchema])
async def posterior_rows(draw_no: int, db: AsyncSession = Depends(get_db)):
    return await analysis.posterior_rows_at_draw(db, draw_no)


@router.get("/bayesian/number/{number}", response_model=list[PosteriorRowSchema])
async def posterior_history(
    number: int,
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    return await analysis.posterior_history(db, number, limit)


@router.get("/analysis/draw/{draw_no}", response_model=list[AnalysisRowSchema])
async def analysis_rows(draw_no: int, db: AsyncSession = Depends(get_db)):
    return await analysis.analysis_rows_at_draw(db, draw_no)


@router.get("/analysis/number/{number}", response_model=list[AnalysisRowSchema])
async def analysis_history(
    number: int,
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
):
    return await analysis.analysis_history(db, number, limit)
